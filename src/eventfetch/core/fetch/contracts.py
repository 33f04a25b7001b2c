"""Runtime API contracts: which payload types each API key carries."""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter, ValidationError

from eventfetch.core.errors import ContractError


class ApiContract:
    """Params and result types for one API key."""

    def __init__(self, api_key: str, params: Any = Any, result: Any = Any) -> None:
        self.api_key = api_key
        self.params_type = params
        self.result_type = result
        self._params = TypeAdapter(params)
        self._result = TypeAdapter(result)

    def validate_params(self, value: Any) -> Any:
        return self._validate(self._params, value, "params")

    def validate_result(self, value: Any) -> Any:
        return self._validate(self._result, value, "result")

    def _validate(self, adapter: TypeAdapter, value: Any, part: str) -> Any:
        try:
            return adapter.validate_python(value)
        except ValidationError as e:
            raise ContractError(
                f"Invalid {part} for API '{self.api_key}': {e.error_count()} validation error(s)"
            ) from e


class ApiRegistry:
    """Registry of API contracts keyed by API key.

    Keys that were never registered pass through unchecked.
    """

    def __init__(self) -> None:
        self._contracts: dict[str, ApiContract] = {}

    def register(self, api_key: str, *, params: Any = Any, result: Any = Any) -> ApiContract:
        """Register (or replace) the contract for an API key."""
        contract = ApiContract(api_key, params=params, result=result)
        self._contracts[api_key] = contract
        return contract

    def get(self, api_key: str) -> ApiContract | None:
        return self._contracts.get(api_key)

    def keys(self) -> list[str]:
        return list(self._contracts)

    def __contains__(self, api_key: object) -> bool:
        return api_key in self._contracts

    def __len__(self) -> int:
        return len(self._contracts)

    def validate_params(self, api_key: str, value: Any) -> Any:
        contract = self._contracts.get(api_key)
        return contract.validate_params(value) if contract else value

    def validate_result(self, api_key: str, value: Any) -> Any:
        contract = self._contracts.get(api_key)
        return contract.validate_result(value) if contract else value
