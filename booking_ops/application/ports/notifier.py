from abc import ABC, abstractmethod
from typing import Any


class NotifierPort(ABC):
    @abstractmethod
    def notify(self, recipient: str, template: str, data: dict[str, Any]) -> None:
        raise NotImplementedError
