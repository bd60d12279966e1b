"""
CDEF register data generator - core library

Synthetic Danish register extracts (BEF, AKM, IDAN, IND, UDDF, LPR2, LPR3)
with person (PNR) and contact (RECNUM) identifiers kept consistent across
registers and years.

Usage:
    from cdef_core import GenerationRunner, RunConfig

    config = RunConfig(registers=["bef", "lpr_adm", "lpr_diag"], years=(2000, 2002), rows=1000)
    result = GenerationRunner(config).run()
"""

__version__ = "0.1.0"

from .config import build_run_config, load_config, validate_config
from .identity import IdentityContext
from .runner import GenerationRunner, RunConfig, RunResult, run_inspect

__all__ = [
    "GenerationRunner",
    "IdentityContext",
    "RunConfig",
    "RunResult",
    "build_run_config",
    "load_config",
    "run_inspect",
    "validate_config",
    "__version__",
]
