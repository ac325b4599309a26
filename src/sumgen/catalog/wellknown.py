"""Method sets of predeclared and standard library types.

Interfaces and structs in the analyzed package often embed these. Their
members are written here in Go syntax and parsed on first use.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sumgen.catalog.model import Embed, Member
from sumgen.golang.parser import parse_signature_text

# Qualifiers used by the signatures below.
_PATHS = {"fmt": "fmt", "io": "io", "sync": "sync", "time": "time"}


@dataclass(frozen=True)
class _Known:
    methods: tuple[tuple[str, str], ...] = ()
    embeds: tuple[tuple[str, str], ...] = ()
    # Concrete types whose methods all have pointer receivers.
    pointer: bool = False


_INTERFACES: dict[tuple[str, str], _Known] = {
    ("", "error"): _Known(methods=(("Error", "() string"),)),
    ("fmt", "Stringer"): _Known(methods=(("String", "() string"),)),
    ("fmt", "GoStringer"): _Known(methods=(("GoString", "() string"),)),
    ("fmt", "Formatter"): _Known(methods=(("Format", "(f fmt.State, verb rune)"),)),
    ("io", "Reader"): _Known(methods=(("Read", "(p []byte) (n int, err error)"),)),
    ("io", "Writer"): _Known(methods=(("Write", "(p []byte) (n int, err error)"),)),
    ("io", "Closer"): _Known(methods=(("Close", "() error"),)),
    ("io", "Seeker"): _Known(methods=(("Seek", "(offset int64, whence int) (int64, error)"),)),
    ("io", "ReaderAt"): _Known(methods=(("ReadAt", "(p []byte, off int64) (n int, err error)"),)),
    ("io", "WriterAt"): _Known(methods=(("WriteAt", "(p []byte, off int64) (n int, err error)"),)),
    ("io", "ReaderFrom"): _Known(methods=(("ReadFrom", "(r io.Reader) (n int64, err error)"),)),
    ("io", "WriterTo"): _Known(methods=(("WriteTo", "(w io.Writer) (n int64, err error)"),)),
    ("io", "ByteReader"): _Known(methods=(("ReadByte", "() (byte, error)"),)),
    ("io", "ByteWriter"): _Known(methods=(("WriteByte", "(c byte) error"),)),
    ("io", "RuneReader"): _Known(methods=(("ReadRune", "() (r rune, size int, err error)"),)),
    ("io", "StringWriter"): _Known(methods=(("WriteString", "(s string) (n int, err error)"),)),
    ("io", "ReadWriter"): _Known(embeds=(("io", "Reader"), ("io", "Writer"))),
    ("io", "ReadCloser"): _Known(embeds=(("io", "Reader"), ("io", "Closer"))),
    ("io", "WriteCloser"): _Known(embeds=(("io", "Writer"), ("io", "Closer"))),
    ("io", "ReadWriteCloser"): _Known(
        embeds=(("io", "Reader"), ("io", "Writer"), ("io", "Closer"))
    ),
    ("io", "ReadSeeker"): _Known(embeds=(("io", "Reader"), ("io", "Seeker"))),
    ("io", "WriteSeeker"): _Known(embeds=(("io", "Writer"), ("io", "Seeker"))),
    ("io", "ReadWriteSeeker"): _Known(
        embeds=(("io", "Reader"), ("io", "Writer"), ("io", "Seeker"))
    ),
    ("sort", "Interface"): _Known(
        methods=(
            ("Len", "() int"),
            ("Less", "(i, j int) bool"),
            ("Swap", "(i, j int)"),
        )
    ),
    ("encoding", "TextMarshaler"): _Known(
        methods=(("MarshalText", "() (text []byte, err error)"),)
    ),
    ("encoding", "TextUnmarshaler"): _Known(methods=(("UnmarshalText", "(text []byte) error"),)),
    ("encoding", "BinaryMarshaler"): _Known(
        methods=(("MarshalBinary", "() (data []byte, err error)"),)
    ),
    ("encoding", "BinaryUnmarshaler"): _Known(
        methods=(("UnmarshalBinary", "(data []byte) error"),)
    ),
    ("encoding/json", "Marshaler"): _Known(methods=(("MarshalJSON", "() ([]byte, error)"),)),
    ("encoding/json", "Unmarshaler"): _Known(methods=(("UnmarshalJSON", "([]byte) error"),)),
    ("context", "Context"): _Known(
        methods=(
            ("Deadline", "() (deadline time.Time, ok bool)"),
            ("Done", "() <-chan struct{}"),
            ("Err", "() error"),
            ("Value", "(key any) any"),
        )
    ),
    ("sync", "Locker"): _Known(methods=(("Lock", "()"), ("Unlock", "()"))),
    ("flag", "Value"): _Known(methods=(("String", "() string"), ("Set", "(string) error"))),
}

_STRUCTS: dict[tuple[str, str], _Known] = {
    ("sync", "Mutex"): _Known(
        methods=(("Lock", "()"), ("Unlock", "()"), ("TryLock", "() bool")), pointer=True
    ),
    ("sync", "RWMutex"): _Known(
        methods=(
            ("Lock", "()"),
            ("Unlock", "()"),
            ("TryLock", "() bool"),
            ("RLock", "()"),
            ("RUnlock", "()"),
            ("TryRLock", "() bool"),
            ("RLocker", "() sync.Locker"),
        ),
        pointer=True,
    ),
    ("sync", "WaitGroup"): _Known(
        methods=(("Add", "(delta int)"), ("Done", "()"), ("Wait", "()")), pointer=True
    ),
    ("sync", "Once"): _Known(methods=(("Do", "(f func())"),), pointer=True),
}


def _members(known: _Known) -> list[Member]:
    members: list[Member] = []
    for package, name in known.embeds:
        members.extend(interface_members(Embed(name, package)) or ())
    members.extend(
        Member(name, parse_signature_text(text, resolve=_PATHS.__getitem__))
        for name, text in known.methods
    )
    return members


@lru_cache(maxsize=None)
def interface_members(embed: Embed) -> tuple[Member, ...] | None:
    """Method set of a well-known interface, or None when it is not one."""
    known = _INTERFACES.get((embed.package, embed.name))
    if known is None:
        return None
    return tuple(_members(known))


@lru_cache(maxsize=None)
def struct_methods(embed: Embed) -> tuple[tuple[Member, ...], bool] | None:
    """Methods of a well-known concrete type and whether they need ``*T``."""
    known = _STRUCTS.get((embed.package, embed.name))
    if known is None:
        return None
    return tuple(_members(known)), known.pointer
