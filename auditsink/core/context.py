# auditsink/core/context.py

import contextvars

correlation_id_ctx = contextvars.ContextVar("correlation_id", default=None)
request_id_ctx = contextvars.ContextVar("request_id", default=None)
