"""
PDF object graph assembly and serialization.

Every object lives in one arena owned by the assembler; cross references
are arena handles wrapped in pypdf IndirectObjects, so the graph can be
checked for dangling references in a single pass before it is written.
"""

# Standard Library
import contextlib
import enum
import errno
import io
import os
import pathlib
import stat
import tempfile
import typing

# PIP3 modules
import pypdf.generic

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.emit


LayoutConfig = olc.config.LayoutConfig
LabelPage = olc.emit.LabelPage

PDF_VERSION = olc.config.PDF_VERSION
FONT_ENCODING = olc.config.FONT_ENCODING
FONT_RESOURCE_KEYS = olc.emit.FONT_RESOURCE_KEYS

NameObject = pypdf.generic.NameObject
NumberObject = pypdf.generic.NumberObject
DictionaryObject = pypdf.generic.DictionaryObject
ArrayObject = pypdf.generic.ArrayObject
IndirectObject = pypdf.generic.IndirectObject

WINDOWS_ACCESS_DENIED = 5


class DestinationLockedError(PermissionError):
	"""
	The destination file is held open by another process.
	"""


class AssemblerStateError(RuntimeError):
	"""
	Raised when an assembler step runs out of order.
	"""


class DanglingReferenceError(ValueError):
	"""
	Raised when the object graph references a missing object.
	"""


class DocumentState(enum.Enum):
	EMPTY = "empty"
	ACCUMULATING = "accumulating"
	FINALIZED = "finalized"
	SERIALIZED = "serialized"
	FAILED = "failed"


class DocumentGraph:
	"""
	Arena of PDF objects addressed by 1-based object numbers.
	"""

	def __init__(self) -> None:
		self.objects: list[pypdf.generic.PdfObject | None] = []
		self.trailer = DictionaryObject()

	def __len__(self) -> int:
		return len(self.objects)

	def reserve(self) -> IndirectObject:
		"""
		Allocate a handle whose object is filled in later.
		"""
		self.objects.append(None)
		return IndirectObject(len(self.objects), 0, self)

	def add(self, obj: pypdf.generic.PdfObject) -> IndirectObject:
		self.objects.append(obj)
		return IndirectObject(len(self.objects), 0, self)

	def set(self, ref: IndirectObject, obj: pypdf.generic.PdfObject) -> None:
		self.objects[ref.idnum - 1] = obj

	def get_object(self, ref: IndirectObject | int) -> pypdf.generic.PdfObject | None:
		"""
		Resolve a handle, as pypdf expects from an IndirectObject owner.
		"""
		idnum = ref if isinstance(ref, int) else ref.idnum
		if idnum < 1 or idnum > len(self.objects):
			return None
		return self.objects[idnum - 1]

	def iter_references(self) -> typing.Iterator[tuple[str, IndirectObject]]:
		"""
		Yield every reference in the graph with a label of its holder.
		"""
		for idnum, obj in enumerate(self.objects, start=1):
			for ref in _collect_references(obj):
				yield (f"object {idnum}", ref)
		for ref in _collect_references(self.trailer):
			yield ("trailer", ref)

	def check_references(self) -> None:
		"""
		Verify that every reference resolves to an allocated object.

		Raises:
			DanglingReferenceError: On the first unresolved reference.
		"""
		for idnum, obj in enumerate(self.objects, start=1):
			if obj is None:
				raise DanglingReferenceError(f"Object {idnum} was reserved but never filled in")
		for holder, ref in self.iter_references():
			if self.get_object(ref) is None:
				raise DanglingReferenceError(f"{holder} references missing object {ref.idnum}")

	def write(self, stream: typing.BinaryIO) -> None:
		"""
		Write the graph as a complete PDF file with a classic xref table.
		pypdf's PdfWriter owns its own catalog and page tree, so only object
		encoding is delegated to pypdf and the file framing is written here.

		Args:
			stream: Binary output stream positioned at its start.
		"""
		stream.write(f"%PDF-{PDF_VERSION}\n".encode("ascii"))
		stream.write(b"%\xe2\xe3\xcf\xd3\n")
		offsets: list[int] = []
		for idnum, obj in enumerate(self.objects, start=1):
			offsets.append(stream.tell())
			stream.write(f"{idnum} 0 obj\n".encode("ascii"))
			obj.write_to_stream(stream)
			stream.write(b"\nendobj\n")

		xref_offset = stream.tell()
		stream.write(f"xref\n0 {len(self.objects) + 1}\n".encode("ascii"))
		stream.write(b"0000000000 65535 f \n")
		for offset in offsets:
			stream.write(f"{offset:010d} 00000 n \n".encode("ascii"))

		self.trailer[NameObject("/Size")] = NumberObject(len(self.objects) + 1)
		stream.write(b"trailer\n")
		self.trailer.write_to_stream(stream)
		stream.write(f"\nstartxref\n{xref_offset}\n%%EOF\n".encode("ascii"))


#============================================
def _collect_references(obj: typing.Any) -> list[IndirectObject]:
	"""
	Find the IndirectObjects nested inside a PDF object.

	Args:
		obj: PDF object.

	Returns:
		List of references in document order.
	"""
	if isinstance(obj, IndirectObject):
		return [obj]
	refs: list[IndirectObject] = []
	if isinstance(obj, dict):
		for value in obj.values():
			refs.extend(_collect_references(value))
	elif isinstance(obj, list):
		for value in obj:
			refs.extend(_collect_references(value))
	return refs


#============================================
def check_destination_writable(output_path: pathlib.Path) -> None:
	"""
	Open an existing destination for update and close it again.

	A file held open by a PDF viewer fails here with the real sharing
	violation, before any temporary file is written.

	Args:
		output_path: Destination PDF path.

	Raises:
		OSError: If the destination exists and cannot be opened for writing.
	"""
	if not output_path.exists():
		return
	with open(output_path, "r+b"):
		pass


#============================================
def destination_mode(output_path: pathlib.Path) -> int:
	"""
	Permission bits the saved file should carry.

	Args:
		output_path: Destination PDF path.

	Returns:
		The existing file's mode, or 0o666 filtered by the umask.
	"""
	if output_path.exists():
		return stat.S_IMODE(os.stat(output_path).st_mode)
	umask = os.umask(0)
	os.umask(umask)
	return 0o666 & ~umask


#============================================
def build_font(base_font: str) -> DictionaryObject:
	"""
	Build a standard Type1 font dictionary.

	Args:
		base_font: Standard font name such as Helvetica.

	Returns:
		Font dictionary.
	"""
	return DictionaryObject({
		NameObject("/Type"): NameObject("/Font"),
		NameObject("/Subtype"): NameObject("/Type1"),
		NameObject("/BaseFont"): NameObject(f"/{base_font}"),
		NameObject("/Encoding"): NameObject(f"/{FONT_ENCODING}"),
	})


class DocumentAssembler:
	"""
	Accumulates label pages into one PDF object graph and saves it.

	State runs Empty -> Accumulating -> Finalized -> Serialized or Failed.
	"""

	def __init__(self, layout: LayoutConfig, compress: bool = True) -> None:
		self.layout = layout
		self.compress = compress
		self.graph = DocumentGraph()
		self.state = DocumentState.EMPTY
		self.pages_ref = self.graph.reserve()
		self.catalog_ref: IndirectObject | None = None
		self.kids = ArrayObject()

		font_refs = {
			olc.emit.FONT_REGULAR: self.graph.add(build_font(layout.font_regular)),
			olc.emit.FONT_BOLD: self.graph.add(build_font(layout.font_bold)),
		}
		font_dict = DictionaryObject()
		for logical_name, ref in font_refs.items():
			font_dict[NameObject(FONT_RESOURCE_KEYS[logical_name])] = ref
		self.font_refs = font_refs
		self.resources_ref = self.graph.add(DictionaryObject({
			NameObject("/Font"): font_dict,
			NameObject("/ProcSet"): ArrayObject([NameObject("/PDF"), NameObject("/Text")]),
		}))

	@property
	def page_count(self) -> int:
		return len(self.kids)

	def _require(self, *states: DocumentState) -> None:
		if self.state not in states:
			allowed = ", ".join(state.value for state in states)
			raise AssemblerStateError(
				f"Document is {self.state.value}; expected one of: {allowed}"
			)

	def _build_content_stream(self, page: LabelPage) -> pypdf.generic.StreamObject:
		stream = pypdf.generic.DecodedStreamObject()
		stream.set_data(olc.emit.encode_primitives(page.primitives))
		if self.compress:
			return stream.flate_encode()
		return stream

	def add_page(self, page: LabelPage) -> IndirectObject:
		"""
		Add one label page and its content stream to the graph.

		Args:
			page: LabelPage from the primitive emitter.

		Returns:
			Reference to the new Page object.
		"""
		self._require(DocumentState.EMPTY, DocumentState.ACCUMULATING)
		content_ref = self.graph.add(self._build_content_stream(page))
		media_box = pypdf.generic.RectangleObject(
			[0, 0, self.layout.label_width, self.layout.label_height]
		)
		page_ref = self.graph.add(DictionaryObject({
			NameObject("/Type"): NameObject("/Page"),
			NameObject("/Parent"): self.pages_ref,
			NameObject("/Resources"): self.resources_ref,
			NameObject("/MediaBox"): media_box,
			NameObject("/Contents"): content_ref,
		}))
		self.kids.append(page_ref)
		self.state = DocumentState.ACCUMULATING
		return page_ref

	def finalize(self) -> None:
		"""
		Fill in the page tree, catalog, and trailer once every page exists.
		"""
		self._require(DocumentState.ACCUMULATING)
		self.graph.set(self.pages_ref, DictionaryObject({
			NameObject("/Type"): NameObject("/Pages"),
			NameObject("/Kids"): self.kids,
			NameObject("/Count"): NumberObject(len(self.kids)),
		}))
		self.catalog_ref = self.graph.add(DictionaryObject({
			NameObject("/Type"): NameObject("/Catalog"),
			NameObject("/Pages"): self.pages_ref,
		}))
		self.graph.trailer[NameObject("/Root")] = self.catalog_ref
		self.graph.check_references()
		self.state = DocumentState.FINALIZED

	def to_bytes(self) -> bytes:
		"""
		Serialize the finalized graph in memory.
		"""
		self._require(DocumentState.FINALIZED)
		buffer = io.BytesIO()
		self.graph.write(buffer)
		return buffer.getvalue()

	def save(self, output_path: pathlib.Path) -> None:
		"""
		Write the document to disk in one atomic replace.

		The bytes go to a temporary file beside the destination, which
		then replaces the destination. On failure the destination is left
		untouched and the temporary file is removed.

		The saved file keeps the permissions of the file it replaces.

		Args:
			output_path: Destination PDF path.

		Raises:
			DestinationLockedError: If another process holds the destination.
			OSError: If writing or replacing fails.
		"""
		data = self.to_bytes()
		output_path = pathlib.Path(output_path)
		existed = output_path.exists()
		temp_name = None
		try:
			check_destination_writable(output_path)
			mode = destination_mode(output_path)
			with tempfile.NamedTemporaryFile(
				mode="wb",
				dir=output_path.parent,
				prefix=f".{output_path.name}.",
				suffix=".tmp",
				delete=False,
			) as handle:
				temp_name = handle.name
				handle.write(data)
				handle.flush()
				os.fsync(handle.fileno())
			os.chmod(temp_name, mode)
			try:
				os.replace(temp_name, output_path)
			except PermissionError as error:
				# ERROR_ACCESS_DENIED: windows refuses the rename while a viewer holds the file
				if existed and getattr(error, "winerror", None) == WINDOWS_ACCESS_DENIED:
					raise DestinationLockedError(
						errno.EACCES, "Destination is in use", str(output_path)
					) from error
				raise
		except OSError:
			self.state = DocumentState.FAILED
			if temp_name is not None:
				with contextlib.suppress(FileNotFoundError):
					os.unlink(temp_name)
			raise
		self.state = DocumentState.SERIALIZED
