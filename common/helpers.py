from typing import (
    List, Dict, Callable,
    TypeVar, Iterable, Any
)

T = TypeVar('T')
U = TypeVar('U')

def group_by(ls : Iterable[T], mapping: Callable[[T],U]) -> Dict[U, List[T]]:
    retdict : Dict[U, List[T]] = {}
    for elt in ls:
        key = mapping(elt)
        if key in retdict:
            retdict[key].append(elt)
        else:
            retdict.update({key: [elt]})
    return retdict

def merge_settings(*settings: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge of settings maps, left to right.
    Keys of later maps win, and keep the position they first appeared at.

    :return: A new dict, none of the inputs is touched.
    :rtype: Dict[str, Any]
    """
    retdict : Dict[str, Any] = {}
    for setting in settings:
        for key, value in setting.items():
            retdict[key] = value
    return retdict

def parse_boolean_string(value: str, name: str) -> bool:
    """Context values arrive as strings, only "true" and "false" are accepted.

    :raises ValueError: For anything else, including None.
    """
    if value == 'true':
        return True
    if value == 'false':
        return False
    raise ValueError(f"{name} parameter is required to be set as - true or false, got {value}")
