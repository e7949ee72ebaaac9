"""Release-vs-CI artifact verification engine."""

from gode_engine.config import GodeCheckConfig, load_config
from gode_engine.errors import GodeCheckError
from gode_engine.pipeline import PipelineObserver, run_verification
from gode_engine.reference import parse_release_url

__version__ = "1.0.0"

__all__ = [
    "GodeCheckConfig",
    "GodeCheckError",
    "PipelineObserver",
    "__version__",
    "load_config",
    "parse_release_url",
    "run_verification",
]
