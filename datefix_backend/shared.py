"""Backend-facing alias for shared utilities.

Backend modules import from here so `datefix_shared` can be reorganized
without touching every feature module.
"""

from __future__ import annotations

import datefix_shared as _root_shared

Result = _root_shared.Result
ErrorCode = _root_shared.ErrorCode
ItemKind = _root_shared.ItemKind
MEDIA_KINDS = _root_shared.MEDIA_KINDS
SkipReason = _root_shared.SkipReason
UpdateKind = _root_shared.UpdateKind
parse_item_kinds = _root_shared.parse_item_kinds
get_logger = _root_shared.get_logger
log_success = _root_shared.log_success
log_structured = _root_shared.log_structured
run_id_var = _root_shared.run_id_var
sanitize_error_message = _root_shared.sanitize_error_message
utc_now = _root_shared.utc_now
to_utc = _root_shared.to_utc
from_epoch = _root_shared.from_epoch
parse_timestamp = _root_shared.parse_timestamp
format_timestamp = _root_shared.format_timestamp
timer = _root_shared.timer

__all__ = list(_root_shared.__all__)
