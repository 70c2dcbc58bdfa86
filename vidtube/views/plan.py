from typing import Any, List, Optional, Sequence, Tuple, Union

from vidtube.views.stages import Count, Flag, JoinMany, JoinOne, Limit, Match, Project, Skip, Sort


class ViewPlan:
    """Fluent builder over the view stage algebra"""

    def __init__(self, stages: Sequence[Any] = ()):
        self._stages: List[Any] = list(stages)

    def match(self, filter: dict) -> "ViewPlan":
        self._stages.append(Match(filter))
        return self

    def join_one(self, from_: str, local_field: str, foreign_field: str, as_: str,
                 fields: Optional[Sequence[str]] = None,
                 nested: Union["ViewPlan", Sequence[Any]] = ()) -> "ViewPlan":
        self._stages.append(JoinOne(from_, local_field, foreign_field, as_,
                                    _fields(fields), _stages(nested)))
        return self

    def join_many(self, from_: str, local_field: str, foreign_field: str, as_: str,
                  fields: Optional[Sequence[str]] = None,
                  nested: Union["ViewPlan", Sequence[Any]] = ()) -> "ViewPlan":
        self._stages.append(JoinMany(from_, local_field, foreign_field, as_,
                                     _fields(fields), _stages(nested)))
        return self

    def count(self, from_: str, local_field: str, foreign_field: str, as_: str) -> "ViewPlan":
        self._stages.append(Count(from_, local_field, foreign_field, as_))
        return self

    def flag(self, from_: str, local_field: str, foreign_field: str,
             actor_field: str, actor_id: Optional[str], as_: str) -> "ViewPlan":
        self._stages.append(Flag(from_, local_field, foreign_field, actor_field, actor_id, as_))
        return self

    def project(self, *include: str, exclude: Sequence[str] = ()) -> "ViewPlan":
        self._stages.append(Project(tuple(include), tuple(exclude)))
        return self

    def sort(self, *keys: Tuple[str, int]) -> "ViewPlan":
        self._stages.append(Sort(tuple(keys)))
        return self

    def skip(self, n: int) -> "ViewPlan":
        self._stages.append(Skip(n))
        return self

    def limit(self, n: int) -> "ViewPlan":
        self._stages.append(Limit(n))
        return self

    def extend(self, other: Union["ViewPlan", Sequence[Any]]) -> "ViewPlan":
        self._stages.extend(_stages(other))
        return self

    def build(self) -> Tuple[Any, ...]:
        return tuple(self._stages)


def _fields(fields: Optional[Sequence[str]]) -> Optional[Tuple[str, ...]]:
    return tuple(fields) if fields else None


def _stages(value: Union[ViewPlan, Sequence[Any]]) -> Tuple[Any, ...]:
    if isinstance(value, ViewPlan):
        return value.build()
    return tuple(value)
