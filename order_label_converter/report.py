"""
Outcome reporting: success messages and classified failures.
"""

# Standard Library
import dataclasses
import enum
import errno

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.document


RenderResult = olc.config.RenderResult

# Windows ERROR_SHARING_VIOLATION and ERROR_LOCK_VIOLATION
WINDOWS_LOCKED_CODES = (32, 33)
POSIX_LOCKED_CODES = (errno.EBUSY, errno.ETXTBSY)

SUPPORT_BANNER = "-------------------------------------------------"


class ErrorKind(enum.Enum):
	GROUPING_INPUT = "grouping_input"
	MISSING_FULFILLMENT = "missing_fulfillment"
	DESTINATION_LOCKED = "destination_locked"
	SAVE_FAILED = "save_failed"
	NO_LABELS = "no_labels"


@dataclasses.dataclass(frozen=True)
class Success:
	message: str
	path: str
	page_count: int
	result: RenderResult | None = None
	ok: bool = dataclasses.field(default=True, init=False)


@dataclasses.dataclass(frozen=True)
class Failure:
	message: str
	kind: ErrorKind
	path: str
	ok: bool = dataclasses.field(default=False, init=False)


#============================================
def is_destination_locked(error: OSError) -> bool:
	"""
	Detect a save failure caused by another process holding the file.

	Args:
		error: Error raised while saving.

	Returns:
		True for sharing or lock violations.
	"""
	if isinstance(error, olc.document.DestinationLockedError):
		return True
	winerror = getattr(error, "winerror", None)
	if winerror in WINDOWS_LOCKED_CODES:
		return True
	return error.errno in POSIX_LOCKED_CODES


#============================================
def classify_save_error(error: OSError) -> ErrorKind:
	if is_destination_locked(error):
		return ErrorKind.DESTINATION_LOCKED
	return ErrorKind.SAVE_FAILED


#============================================
def report_success(path: str, page_count: int, result: RenderResult | None = None) -> Success:
	message = f"The order labels have been saved to {path}"
	return Success(message=message, path=str(path), page_count=page_count, result=result)


#============================================
def report_save_error(path: str, error: OSError) -> Failure:
	"""
	Turn a save error into a user-facing failure.

	Args:
		path: Destination path.
		error: Error raised while saving.

	Returns:
		Failure classified as locked or generic.
	"""
	kind = classify_save_error(error)
	if kind == ErrorKind.DESTINATION_LOCKED:
		message = (
			"The PDF file may be open in another program. "
			"Please close it and try again.\n"
			f"{path}"
		)
	else:
		message = "\n".join([
			"Error saving the PDF file:",
			str(path),
			SUPPORT_BANNER,
			"Please send a copy of this error to support:",
			SUPPORT_BANNER,
			repr(error),
		])
	return Failure(message=message, kind=kind, path=str(path))


#============================================
def report_grouping_error(path: str, error: Exception) -> Failure:
	message = f"The order file could not be read:\n{error}"
	return Failure(message=message, kind=ErrorKind.GROUPING_INPUT, path=str(path))


#============================================
def report_missing_fulfillment(path: str, error: Exception) -> Failure:
	message = f"No labels were saved. {error}; check the order export."
	return Failure(message=message, kind=ErrorKind.MISSING_FULFILLMENT, path=str(path))


#============================================
def report_no_labels(path: str) -> Failure:
	message = "No labels were saved because the orders produced no label pages."
	return Failure(message=message, kind=ErrorKind.NO_LABELS, path=str(path))
