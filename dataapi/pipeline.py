"""
DataAPI Pipeline - Ordered, immutable sequence of aggregation stages
"""
from typing import Iterator, Tuple

from .errors import InvalidArgumentError
from .interfaces import StageInterface


class Pipeline:
    """
    An aggregation pipeline.

    Stages are stored in the order they are given. A pipeline never changes
    after construction; ``with_stages`` returns a new pipeline instead.

    Args:
        *stages: Stage objects (see ``Stage``)

    Example:
        >>> pipeline = Pipeline(
        ...     Stage.match({'status': 'A'}),
        ...     Stage.limit(10),
        ... )
        >>> len(pipeline)
        2
    """

    __slots__ = ("_stages",)

    def __init__(self, *stages: StageInterface):
        for position, stage in enumerate(stages):
            if not isinstance(stage, StageInterface):
                raise InvalidArgumentError(
                    f"Expected pipeline item {position} to be a stage, "
                    f"got {type(stage).__name__}: {stage!r}"
                )
        object.__setattr__(self, "_stages", tuple(stages))

    @property
    def stages(self) -> Tuple[StageInterface, ...]:
        return self._stages

    def get_stages(self) -> Tuple[StageInterface, ...]:
        """Return the stages as a read-only tuple."""
        return self._stages

    def with_stages(self, *stages: StageInterface) -> "Pipeline":
        """
        Return a new pipeline with ``stages`` appended.

        Example:
            >>> longer = pipeline.with_stages(Stage.skip(5))
        """
        return Pipeline(*(self._stages + stages))

    def __iter__(self) -> Iterator[StageInterface]:
        return iter(self._stages)

    def __len__(self) -> int:
        return len(self._stages)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Pipeline):
            return NotImplemented
        return self._stages == other._stages

    __hash__ = None

    def __reduce__(self):
        return Pipeline, self._stages

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __setattr__(self, name, value):
        raise AttributeError("Pipeline is immutable")

    def __repr__(self) -> str:
        return f"Pipeline({', '.join(repr(stage) for stage in self._stages)})"
