from typing import Union

IdType = Union[str, int]
EventId = str
