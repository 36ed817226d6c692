# autodiff_engine/__init__.py
# Forward-mode dual numbers and a reverse-mode computation graph

from .core.var import Variable
from .core.tape import Tape, global_tape, use_tape, current_tape
from .core.engine import GradientTape, differentiate
from .core.seeds import (
    leaf,
    constant,
    value,
    grad,
    grads,
    grads_list,
    derivative,
    forward_jacobian,
)
from .core.config import ADConfig, get_config, use_config
from .core.errors import (
    ADError,
    DivisionByZero,
    DimensionMismatch,
    UnsupportedOperator,
    CyclicGraphDetected,
    TapeMismatch,
)

# Forward mode
from . import dual
from .dual import ScalarDual, VectorDual, seed_scalar, seed_vector, seed_vectors

# Graph ops (sin, cos, ... on Variables)
from . import ops
from . import bumping

__all__ = [
    # Reverse mode
    'Variable',
    'Tape',
    'global_tape',
    'use_tape',
    'current_tape',
    'GradientTape',
    'differentiate',
    'leaf',
    'constant',
    'value',
    'grad',
    'grads',
    'grads_list',
    # Forward mode
    'dual',
    'ScalarDual',
    'VectorDual',
    'seed_scalar',
    'seed_vector',
    'seed_vectors',
    'derivative',
    'forward_jacobian',
    # Config / errors
    'ADConfig',
    'get_config',
    'use_config',
    'ADError',
    'DivisionByZero',
    'DimensionMismatch',
    'UnsupportedOperator',
    'CyclicGraphDetected',
    'TapeMismatch',
    # Submodules
    'ops',
    'bumping',
]
