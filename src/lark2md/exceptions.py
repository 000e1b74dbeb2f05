#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/exceptions.py
"""Custom exceptions for the lark2md library.

Unsupported and malformed blocks are never reported through exceptions: the
transformer absorbs them and degrades the affected subtree. The classes below
cover the failures that abort a whole conversion.

Exception Hierarchy
-------------------
- Lark2MdError (base exception)

  - ValidationError (parameter/option validation)
    - InvalidOptionsError (wrong options class for parser or renderer)

  - ParsingError (block snapshot loading failures)
    - MalformedFileError (unreadable or structurally invalid JSON snapshot)

  - InvariantViolationError (structural invariants of the block tree)
    - InvalidRootError (root block is not a PAGE)
    - CyclicBlockReferenceError (a block is its own ancestor)

  - RenderingError (output generation failures)
    - OutputWriteError (file write failures)

"""

from typing import Any, Sequence


class Lark2MdError(Exception):
    """Base exception class for all lark2md-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(Lark2MdError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class InvalidOptionsError(ValidationError):
    """Exception raised when an options object of the wrong class is supplied.

    Parameters
    ----------
    converter_name : str
        Name of the component that received invalid options
    expected_type : type
        The expected options class type
    received_type : type
        The actual options class type that was received
    message : str, optional
        Custom error message. If not provided, generates a helpful message
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        converter_name: str,
        expected_type: type,
        received_type: type,
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the invalid options error."""
        if message is None:
            message = (
                f"{converter_name} expected options of type '{expected_type.__name__}' "
                f"but received '{received_type.__name__}'."
            )
        super().__init__(
            message, parameter_name="options", parameter_value=received_type, original_error=original_error
        )
        self.converter_name = converter_name
        self.expected_type = expected_type
        self.received_type = received_type


class ParsingError(Lark2MdError):
    """Exception raised when a block snapshot cannot be loaded.

    Parameters
    ----------
    message : str
        Description of the parsing failure
    parsing_stage : str, optional
        The stage of parsing where the error occurred
    original_error : Exception, optional
        The underlying exception that caused the parsing failure

    """

    def __init__(self, message: str, parsing_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the parsing error."""
        super().__init__(message, original_error)
        self.parsing_stage = parsing_stage


class MalformedFileError(ParsingError):
    """Exception raised when a snapshot is not valid JSON or holds no blocks.

    Parameters
    ----------
    message : str
        Description of what is malformed
    file_path : str, optional
        Path to the malformed file
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the malformed file error."""
        super().__init__(message, parsing_stage="load", original_error=original_error)
        self.file_path = file_path


class InvariantViolationError(Lark2MdError):
    """Exception raised when the block tree breaks a structural invariant.

    These are the only failures that abort a transformation. The caller
    receives no partial result.

    Parameters
    ----------
    message : str
        Description of the violated invariant
    block_id : str, optional
        Id of the block where the violation was detected
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, block_id: str | None = None, original_error: Exception | None = None):
        """Initialize the invariant violation."""
        super().__init__(message, original_error=original_error)
        self.block_id = block_id


class InvalidRootError(InvariantViolationError):
    """Exception raised when the root of a block tree is not a PAGE block.

    Parameters
    ----------
    block_id : str or None
        Id of the offending root block, None when no root could be found
    block_type : any, optional
        Type tag of the offending root block

    """

    def __init__(self, block_id: str | None, block_type: Any = None, message: str | None = None):
        """Initialize the invalid root error."""
        if message is None:
            if block_id is None:
                message = "Block snapshot has no PAGE root block"
            else:
                message = f"Root block '{block_id}' must be a PAGE block, got {block_type!r}"
        super().__init__(message, block_id=block_id)
        self.block_type = block_type


class CyclicBlockReferenceError(InvariantViolationError):
    """Exception raised when a block appears among its own ancestors.

    Parameters
    ----------
    path : sequence of str
        Block ids from the root down to the repeated id, inclusive

    Attributes
    ----------
    path : tuple of str
        The traversal path that closed the cycle

    """

    def __init__(self, path: Sequence[str]):
        """Initialize the cycle error from the offending traversal path."""
        self.path = tuple(path)
        message = "Cyclic child reference detected: " + " -> ".join(self.path)
        super().__init__(message, block_id=self.path[-1] if self.path else None)


class RenderingError(Lark2MdError):
    """Exception raised when output rendering fails.

    Parameters
    ----------
    message : str
        Description of the rendering failure
    rendering_stage : str, optional
        The stage of rendering where the error occurred
    original_error : Exception, optional
        The underlying exception that caused the rendering failure

    """

    def __init__(self, message: str, rendering_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the rendering error."""
        super().__init__(message, original_error)
        self.rendering_stage = rendering_stage


class OutputWriteError(RenderingError):
    """Exception raised when writing output fails.

    Parameters
    ----------
    file_path : str
        Path to the output file that failed to write
    message : str, optional
        Custom error message. If not provided, uses default message
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the output write error."""
        if message is None:
            message = f"Failed to write output file: {file_path}"
        super().__init__(message, rendering_stage="file_write", original_error=original_error)
        self.file_path = file_path


__all__ = [
    "Lark2MdError",
    "ValidationError",
    "InvalidOptionsError",
    "ParsingError",
    "MalformedFileError",
    "InvariantViolationError",
    "InvalidRootError",
    "CyclicBlockReferenceError",
    "RenderingError",
    "OutputWriteError",
]
