from abc import ABC, abstractmethod


class BaseLoader(ABC):
    @abstractmethod
    def iter_transactions(self, window, status=None, account_id=None, default_text=""):
        """
        Asynchronously yield Transaction instances created inside ``window``.
        If account_id is given, only that account's transactions are yielded.
        """
        pass

    async def fetch_transactions(self, window, status=None, account_id=None, default_text=""):
        return [
            tx async for tx in self.iter_transactions(
                window, status=status, account_id=account_id, default_text=default_text
            )
        ]
