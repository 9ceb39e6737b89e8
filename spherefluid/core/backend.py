"""
Backend selection and dispatch for the SPH passes.

Two backends, both always installed:
1. CPU (NumPy) - reference implementation
2. Numba - JIT-compiled loops over particle pairs

The backend can be selected globally or per call. Every dispatched
function must be registered for both.
"""

import enum
import logging
import warnings
from typing import Optional, Dict, Callable, List

import numba

logger = logging.getLogger(__name__)


class Backend(enum.Enum):
    """Available computation backends."""
    CPU = "cpu"      # NumPy
    NUMBA = "numba"  # Numba JIT

    @property
    def description(self) -> str:
        if self is Backend.NUMBA:
            return f"CPU (Numba {numba.__version__}, serial)"
        return "CPU (NumPy)"


class BackendManager:
    """Holds the current backend and the per-backend implementation table."""

    def __init__(self):
        self._current_backend = Backend.CPU
        self._implementations: Dict[str, Dict[Backend, Callable]] = {}

    @property
    def current_backend(self) -> Backend:
        return self._current_backend

    def set_backend(self, backend: Backend):
        if backend != self._current_backend:
            logger.info("Backend set to: %s", backend.description)
        self._current_backend = backend

    def register_implementation(self, function_name: str, backend: Backend,
                                implementation: Callable):
        self._implementations.setdefault(function_name, {})[backend] = implementation

    def get_implementation(self, function_name: str,
                           backend: Optional[Backend] = None) -> Callable:
        """Look up the implementation of a function for a backend.

        Args:
            function_name: Name the implementation was registered under
            backend: Backend to use (None for current)

        Raises:
            ValueError: If the function has no implementation for the backend
        """
        if backend is None:
            backend = self._current_backend
        try:
            return self._implementations[function_name][backend]
        except KeyError:
            raise ValueError(
                f"No {backend.value} implementation registered for {function_name}") from None

    def registered_functions(self) -> Dict[str, List[str]]:
        """Function name -> backends it is registered for."""
        return {name: sorted(b.value for b in impls)
                for name, impls in self._implementations.items()}

    def print_info(self):
        """Print the backends and the registered functions."""
        print("\nSPH Backend Information")
        print("=" * 60)
        for backend in Backend:
            marker = "*" if backend is self._current_backend else " "
            print(f"{marker} {backend.value:6s}: {backend.description}")
        for name, backends in sorted(self.registered_functions().items()):
            print(f"  {name:24s} {', '.join(backends)}")
        print(f"\nCurrent backend: {self._current_backend.value}")
        print("=" * 60)


_backend_manager = BackendManager()


def set_backend(backend: str) -> bool:
    """Set the global backend.

    Args:
        backend: 'cpu' or 'numba'

    Returns:
        True if the name was recognised
    """
    try:
        backend_enum = Backend(backend.lower())
    except ValueError:
        warnings.warn(f"Invalid backend: {backend}. Choose from: cpu, numba")
        return False
    _backend_manager.set_backend(backend_enum)
    return True


def get_backend() -> str:
    """Get current backend name."""
    return _backend_manager.current_backend.value


def list_backends() -> List[str]:
    """Names of every backend."""
    return [b.value for b in Backend]


def print_backend_info():
    _backend_manager.print_info()


def backend_function(function_name: str):
    """Register the decorated function as an implementation of function_name.

    Usage:
        @backend_function("compute_density")
        @for_backend(Backend.NUMBA)
        def _compute_density_numba(...):
            ...
    """
    def decorator(func):
        _backend_manager.register_implementation(function_name, func._backend, func)
        return func
    return decorator


def for_backend(backend: Backend):
    """Tag a function with the backend it implements."""
    def decorator(func):
        func._backend = backend
        return func
    return decorator


def dispatch(function_name: str, *args, backend: Optional[str] = None, **kwargs):
    """Call the implementation of function_name for a backend.

    Args:
        function_name: Registered function name
        *args: Positional arguments
        backend: Override backend name (None for current)
        **kwargs: Keyword arguments

    Returns:
        Function result
    """
    backend_enum = Backend(backend) if backend else None
    impl = _backend_manager.get_implementation(function_name, backend_enum)
    return impl(*args, **kwargs)
