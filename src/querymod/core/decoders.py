# src/querymod/core/decoders.py
import json
from typing import Any, Dict, List, Optional, Union


class JsonDecoder:
    """
    Lenient JSON decoder for request parameter values.

    Only objects and arrays count as a successful decode. Anything else
    (plain text, numbers, malformed JSON) is reported as a failure so the
    caller can treat the input as a literal value.
    """

    def __init__(self):
        self._success = False
        self._data: Optional[Union[Dict[str, Any], List[Any]]] = None

    def decode(self, value: Any) -> bool:
        self._success = False
        self._data = None

        if not isinstance(value, (str, bytes)):
            return False

        try:
            decoded = json.loads(value)
        except (ValueError, TypeError):
            return False

        if isinstance(decoded, (dict, list)):
            self._success = True
            self._data = decoded

        return self._success

    def success(self) -> bool:
        return self._success

    def get_data(self) -> Optional[Union[Dict[str, Any], List[Any]]]:
        return self._data
