"""
PowerShell payload helpers
Scripts travel as -EncodedCommand and answer with a single JSON document
"""
import base64
import json
import re
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from services.errors import RemoteCommandError

ModelT = TypeVar('ModelT', bound=BaseModel)

OPERATION_TAG = re.compile(r'^# operation: (?P<operation>[\w-]+)$', re.MULTILINE)


def build_script(operation: str, body: str) -> str:
    """Prefix a script body with its operation tag and strict error handling"""
    return f"# operation: {operation}\n$ErrorActionPreference = 'Stop'\n{body.strip()}\n"


def script_operation(script: str) -> Optional[str]:
    """Return the operation tag of a script built by build_script"""
    match = OPERATION_TAG.search(script)
    return match.group('operation') if match else None


def quote_literal(value: str) -> str:
    """Quote a value as a single-quoted PowerShell string literal"""
    return "'" + str(value).replace("'", "''") + "'"


def encode_command(script: str) -> str:
    """Encode script the way powershell -EncodedCommand expects (base64 of UTF-16LE)"""
    return base64.b64encode(script.encode('utf-16-le')).decode('ascii')


def build_invocation(executable: str, script: str) -> List[str]:
    """Build the remote command line that runs script non-interactively"""
    return [
        executable,
        '-NoProfile',
        '-NonInteractive',
        '-ExecutionPolicy', 'Bypass',
        '-EncodedCommand', encode_command(script)
    ]


def parse_json_document(stdout: str, hostname: str) -> Any:
    """Parse JSON output with error handling"""
    text = stdout.strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise RemoteCommandError(hostname, f"Failed to parse JSON: {str(e)}")


def expect_object(document: Any, hostname: str, operation: str) -> Dict[str, Any]:
    """Reject output that is not a single JSON object"""
    if not isinstance(document, dict):
        kind = 'no document' if document is None else f"a {type(document).__name__}"
        raise RemoteCommandError(hostname, f"{operation} returned {kind} instead of an object")
    return document


def parse_model(model: Type[ModelT], document: Any, hostname: str, operation: str) -> ModelT:
    """Validate a JSON object into a model, mapping validation failures to RemoteCommandError"""
    document = expect_object(document, hostname, operation)
    try:
        return model.model_validate(document)
    except ValidationError as e:
        raise RemoteCommandError(hostname, f"{operation} returned an unexpected document: {e}")
