"""logsync: session-partitioned logging shared by cooperating processes."""

__version__ = "0.1.0"

from logsync.config import LogsyncConfig, load_config  # noqa: E402
from logsync.instance import LogInstance  # noqa: E402
from logsync.runtime import LoggingRuntime  # noqa: E402
from logsync.sync.types import Role  # noqa: E402

__all__ = ["LogInstance", "LoggingRuntime", "LogsyncConfig", "Role", "load_config", "__version__"]
