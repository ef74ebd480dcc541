"""nextforge -- Next.js frontend scaffolding toolkit.

Generates application skeletons, feature modules, Redux slices and API
service stubs from a handful of name/type parameters.
"""

__version__ = "0.1.0"
