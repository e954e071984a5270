"""
Built-in operation rules.

Importing this package registers one rule per `OpKind` with the
`OperationCatalog`; the modules are imported for that side effect only.
"""

from . import _elementwise
from . import _linear
from . import _convolution
from . import _pooling
from . import _reshape
from . import _losses

__all__ = []
