# crudkit/core/logging/
# ├─ __init__.py       # public API
# ├─ levels.py         # TRACE level + trace() helper
# ├─ builder.py        # make_dict_config(settings) + setup_logging(settings)
# ├─ formatters.py     # JsonFormatter, ColorFormatter
# ├─ filters.py        # RequestIdFilter (+ contextvar helpers), RedactFilter
# ├─ handlers.py       # handler factories for dictConfig (console / file)
# └─ middleware.py     # Starlette middleware that sets the request id

from .levels import TRACE, trace
from .builder import setup_logging, make_dict_config
from .filters import set_request_id, reset_request_id, get_request_id, RequestIdFilter, RedactFilter
from .middleware import RequestIDMiddleware

__all__ = [
    "TRACE",
    "trace",
    "setup_logging",
    "make_dict_config",
    "set_request_id",
    "reset_request_id",
    "get_request_id",
    "RequestIdFilter",
    "RedactFilter",
    "RequestIDMiddleware",
]
