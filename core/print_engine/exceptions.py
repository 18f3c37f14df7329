"""
Print Engine Custom Exceptions
"""


class PrintEngineError(Exception):
    """Base exception for the print engine"""
    pass


class UnsupportedVariantError(PrintEngineError):
    """Unknown document kind / format / copy type combination"""
    def __init__(self, kind: str, paper_format: str, copy_type: str):
        self.kind = kind
        self.paper_format = paper_format
        self.copy_type = copy_type
        super().__init__(
            f"No renderer for {kind} / {paper_format} / {copy_type}"
        )


class OutputWriteError(PrintEngineError):
    """The finished document could not be persisted"""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")
