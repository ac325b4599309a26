"""Error hierarchy for sumgen runs.

Every error is fatal for the current run. Grammar, resolution and conflict
errors are raised before anything is written; resource errors carry the
underlying OS error as ``__cause__``.
"""

from __future__ import annotations


class SumgenError(Exception):
    """Base class for errors reported as ``sumgen: <message>``."""


class GrammarError(SumgenError):
    """Malformed sum-type definition text."""

    GRAMMAR = (
        "declaration must satisfy the form\n"
        '\tDefinition = ContractName "=" Variant { "|" Variant } .\n'
        "\tContractName = identifier .\n"
        '\tVariant = [ "*" ] identifier .'
    )

    def __init__(self, text: str, detail: str = "") -> None:
        message = self.GRAMMAR
        if detail:
            message = f"{detail}\n{message}"
        super().__init__(message)
        self.text = text
        self.detail = detail


class UnresolvedNameError(SumgenError):
    """A contract or variant name has no usable declaration in the catalog."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name


class ConflictError(SumgenError):
    """A required member cannot be synthesized without clobbering something."""

    def __init__(self, receiver: str, member: str, message: str) -> None:
        super().__init__(message)
        self.receiver = receiver
        self.member = member


class FieldCollisionError(ConflictError):
    def __init__(self, receiver: str, member: str) -> None:
        super().__init__(
            receiver, member, f"type {receiver} already has a field named {member}"
        )


class SignatureCollisionError(ConflictError):
    def __init__(self, receiver: str, member: str, *, pointer_receiver: bool = False) -> None:
        message = f"type {receiver} already has a method named {member}"
        if pointer_receiver:
            message += " with a pointer receiver"
        super().__init__(receiver, member, message)
        self.pointer_receiver = pointer_receiver


class DuplicateSignatureError(ConflictError):
    def __init__(self, receiver: str, member: str) -> None:
        super().__init__(
            receiver,
            member,
            f"method {member} already declared with a different signature "
            f"for receiver {receiver}",
        )


class SourceSyntaxError(SumgenError):
    """Go source the declaration scanner cannot read."""

    def __init__(self, message: str, *, filename: str = "", line: int = 0) -> None:
        location = filename or "<source>"
        if line:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")
        self.filename = filename
        self.line = line


class CatalogError(SumgenError):
    """The type catalog could not be loaded or is malformed."""


class ArtifactError(SumgenError):
    """The generated artifact could not be read, parsed or written."""


class LockUnavailableError(SumgenError):
    """Another sumgen run holds the directory lock."""

    def __init__(self, lock_path: str, owner: str = "") -> None:
        message = f"cannot acquire lock {lock_path}"
        if owner:
            message += f" (held by pid {owner})"
        super().__init__(message)
        self.lock_path = lock_path
        self.owner = owner


class NeverThrown(RuntimeError):
    """Raised by ``never()`` when a path assumed unreachable is reached."""

    def __init__(self, message: str, *, env: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.env = dict(env or {})
