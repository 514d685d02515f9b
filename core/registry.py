from typing import Any, Callable, Dict, List, Type, TypeVar

T = TypeVar("T")


class Registry:
    """Maps short names from the settings file (e.g. `model.provider`) to classes."""

    def __init__(self, kind: str):
        self._kind = kind
        self._components: Dict[str, Type[Any]] = {}

    def register(self, name: str) -> Callable[[Type[T]], Type[T]]:
        """
        Class decorator adding the class under `name`.

        Raises:
            ValueError: If another class already uses `name`.
        """
        def decorator(cls: Type[T]) -> Type[T]:
            if name in self._components:
                raise ValueError(f"{self._kind.capitalize()} '{name}' is already registered.")
            self._components[name] = cls
            return cls
        return decorator

    def get(self, name: str) -> Type[Any]:
        try:
            return self._components[name]
        except KeyError:
            raise KeyError(f"No {self._kind} registered under '{name}'.") from None

    def create(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Instantiates the class registered under `name` with the given arguments."""
        return self.get(name)(*args, **kwargs)

    def names(self) -> List[str]:
        return sorted(self._components)

    def __contains__(self, name: str) -> bool:
        return name in self._components


provider_registry = Registry("provider")
