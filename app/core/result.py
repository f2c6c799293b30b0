# app/core/result.py
from typing import TypeVar, Generic, Optional
from dataclasses import dataclass

T = TypeVar('T')  # Success type
E = TypeVar('E')  # Error type


@dataclass
class Result(Generic[T, E]):
    """
    A Result type that represents either success or failure.
    Service and API client calls return one of these instead of raising.
    """
    _value: Optional[T] = None
    _error: Optional[E] = None
    _is_success: bool = False

    @classmethod
    def success(cls, value: T = None) -> 'Result[T, E]':
        """Create a successful result"""
        return cls(_value=value, _error=None, _is_success=True)

    @classmethod
    def failure(cls, error: E) -> 'Result[T, E]':
        """Create a failed result"""
        return cls(_value=None, _error=error, _is_success=False)

    def is_success(self) -> bool:
        return self._is_success

    def is_failure(self) -> bool:
        return not self._is_success

    @property
    def value(self) -> T:
        """Get the success value (raises if failure)"""
        if not self._is_success:
            raise ValueError("Attempted to get value from failed Result")
        return self._value

    @property
    def error(self) -> E:
        """Get the error value (raises if success)"""
        if self._is_success:
            raise ValueError("Attempted to get error from successful Result")
        return self._error

    def __str__(self) -> str:
        if self._is_success:
            return f"Result.success({self._value})"
        return f"Result.failure({self._error})"

    def __repr__(self) -> str:
        return self.__str__()
