"""
DataAPI Endpoint - Request bodies for the Data API actions

Each endpoint knows its action path and builds the body posted to it:

    {'dataSource': ..., 'database': ..., 'collection': ..., <action fields>}

Options are copied into the body only when they are given.
"""
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import InvalidArgumentError
from .interfaces import StageInterface
from .pipeline import Pipeline


class Endpoint:
    """
    Base class of the Data API actions.

    Args:
        data_source: Name of the linked data source
        database: Database name
        collection: Collection name
        fields: Action specific fields, added after the namespace
        options: Optional fields, see ``OPTIONS``
    """

    ACTION: str = ""
    OPTIONS: Tuple[str, ...] = ()

    def __init__(
        self,
        data_source: str,
        database: str,
        collection: str,
        fields: Dict[str, Any],
        options: Optional[Dict[str, Any]] = None,
    ):
        body = {
            "dataSource": data_source,
            "database": database,
            "collection": collection,
        }
        body.update(fields)

        options = options or {}
        unknown = [name for name in options if name not in self.OPTIONS]
        if unknown:
            raise InvalidArgumentError(
                f"Unknown options for {self.ACTION}: {', '.join(sorted(unknown))}"
            )
        for name in self.OPTIONS:
            if options.get(name) is not None:
                body[name] = options[name]

        self.body = body

    @property
    def path(self) -> str:
        return f"action/{self.ACTION}"

    def execute(self, client) -> Dict[str, Any]:
        """POST the body with ``client`` and return the decoded response."""
        return client._request(self.path, self.body)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.body!r})"


class Find(Endpoint):
    ACTION = "find"
    OPTIONS = ("projection", "sort", "limit", "skip")

    def __init__(self, data_source, database, collection, filter, options=None):
        super().__init__(data_source, database, collection, {"filter": filter}, options)


class FindOne(Endpoint):
    ACTION = "findOne"
    OPTIONS = ("projection",)

    def __init__(self, data_source, database, collection, filter, options=None):
        super().__init__(data_source, database, collection, {"filter": filter}, options)


class InsertOne(Endpoint):
    ACTION = "insertOne"

    def __init__(self, data_source, database, collection, document):
        super().__init__(data_source, database, collection, {"document": document})


class InsertMany(Endpoint):
    ACTION = "insertMany"

    def __init__(self, data_source, database, collection, documents):
        super().__init__(data_source, database, collection, {"documents": list(documents)})


class UpdateOne(Endpoint):
    ACTION = "updateOne"
    OPTIONS = ("upsert",)

    def __init__(self, data_source, database, collection, filter, update, options=None):
        super().__init__(
            data_source, database, collection, {"filter": filter, "update": update}, options
        )


class UpdateMany(UpdateOne):
    ACTION = "updateMany"


class DeleteOne(Endpoint):
    ACTION = "deleteOne"

    def __init__(self, data_source, database, collection, filter):
        super().__init__(data_source, database, collection, {"filter": filter})


class DeleteMany(DeleteOne):
    ACTION = "deleteMany"


class Aggregate(Endpoint):
    """
    Runs an aggregation pipeline.

    ``pipeline`` may be a ``Pipeline``, a list of stage objects or a list of
    raw stage documents. A list made only of stage objects is wrapped in a
    ``Pipeline`` so it is validated like one.
    """

    ACTION = "aggregate"

    def __init__(
        self,
        data_source: str,
        database: str,
        collection: str,
        pipeline: Union[Pipeline, List[Any]],
    ):
        if not isinstance(pipeline, Pipeline):
            if not isinstance(pipeline, (list, tuple)):
                raise InvalidArgumentError(
                    f"Expected pipeline to be a Pipeline or a list, "
                    f"got {type(pipeline).__name__}: {pipeline!r}"
                )
            if pipeline and all(isinstance(stage, StageInterface) for stage in pipeline):
                pipeline = Pipeline(*pipeline)
            else:
                pipeline = list(pipeline)
        super().__init__(data_source, database, collection, {"pipeline": pipeline})
