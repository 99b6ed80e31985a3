from abc import ABC, abstractmethod


class BaseOutput(ABC):
    @abstractmethod
    def write(self, categories, window):
        """Render aggregated budget categories for ``window`` to the chosen sink."""
        pass
