"""
Record store - generic create/read/update/delete over named collections

The quiz engine and the leaderboard only talk to this interface, so they can
run against any backend that can filter, sort, range-page and count.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging

from sqlalchemy import func, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from quizboard.exceptions import RecordStoreError
from quizboard.models import Quiz, QuizQuestion, UserQuizAttempt, Profile, UserDailyActivity

logger = logging.getLogger(__name__)

OrderBy = Sequence[Tuple[str, bool]]


@dataclass
class FetchResult:
    """Rows returned by a fetch, plus the total match count when requested"""
    records: List[Dict[str, Any]] = field(default_factory=list)
    count: Optional[int] = None


class RecordStore(ABC):
    """Record store interface"""

    @abstractmethod
    def fetch(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[OrderBy] = None,
        range_: Optional[Tuple[int, int]] = None,
        embed: Iterable[str] = (),
        count: bool = False
    ) -> FetchResult:
        """Fetch records matching equality filters, sorted and range-paged"""
        ...

    def fetch_one(
        self,
        collection: str,
        filters: Mapping[str, Any],
        embed: Iterable[str] = ()
    ) -> Optional[Dict[str, Any]]:
        """Fetch the first record matching filters, or None"""
        result = self.fetch(collection, filters=filters, range_=(0, 0), embed=embed)
        return result.records[0] if result.records else None

    @abstractmethod
    def insert(self, collection: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert one record and return it as stored"""
        ...

    @abstractmethod
    def update(self, collection: str, filters: Mapping[str, Any], patch: Mapping[str, Any]) -> int:
        """Patch matching records, returning the number of rows affected"""
        ...

    @abstractmethod
    def increment(self, collection: str, filters: Mapping[str, Any], column: str, amount: int) -> int:
        """Atomically add `amount` to a numeric column of matching records"""
        ...

    @abstractmethod
    def delete(self, collection: str, filters: Mapping[str, Any]) -> int:
        """Delete matching records, returning the number of rows removed"""
        ...


class SqlAlchemyRecordStore(RecordStore):
    """
    Record store backed by a SQLAlchemy session
    
    Collections map onto the ORM models; embeds map onto model relationships.
    """

    COLLECTIONS = {
        "quizzes": Quiz,
        "quiz_questions": QuizQuestion,
        "user_quiz_attempts": UserQuizAttempt,
        "profiles": Profile,
        "user_daily_activity": UserDailyActivity,
    }

    def __init__(self, db: Session):
        self.db = db

    def fetch(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[OrderBy] = None,
        range_: Optional[Tuple[int, int]] = None,
        embed: Iterable[str] = (),
        count: bool = False
    ) -> FetchResult:
        model = self._model(collection)
        embed = tuple(embed)

        query = self.db.query(model)
        query = self._apply_filters(model, query, filters)
        for name in embed:
            query = query.options(selectinload(self._relationship(model, name)))

        try:
            total = query.count() if count else None

            for column, ascending in order_by or ():
                attr = self._column(model, column)
                query = query.order_by(attr.asc() if ascending else attr.desc())

            if range_ is not None:
                start, end = range_
                if start < 0 or end < start:
                    raise RecordStoreError(f"Invalid range: {range_}")
                query = query.offset(start).limit(end - start + 1)

            rows = query.all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Fetch from {collection} failed: {str(e)}")
            raise RecordStoreError(f"Fetch from {collection} failed") from e

        return FetchResult(
            records=[self._serialize(row, embed) for row in rows],
            count=total
        )

    def insert(self, collection: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        model = self._model(collection)
        for column in record:
            self._column(model, column)

        try:
            obj = model(**record)
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Insert into {collection} failed: {str(e)}")
            raise RecordStoreError(f"Insert into {collection} failed") from e

        logger.debug(f"Inserted into {collection}: {obj.id}")
        return self._serialize(obj, ())

    def update(self, collection: str, filters: Mapping[str, Any], patch: Mapping[str, Any]) -> int:
        model = self._model(collection)
        values = {self._column(model, column): value for column, value in patch.items()}
        return self._execute_update(collection, model, filters, values)

    def increment(self, collection: str, filters: Mapping[str, Any], column: str, amount: int) -> int:
        model = self._model(collection)
        attr = self._column(model, column)
        # Single UPDATE statement, the database serializes concurrent increments
        values = {attr: func.coalesce(attr, 0) + amount}
        return self._execute_update(collection, model, filters, values)

    def delete(self, collection: str, filters: Mapping[str, Any]) -> int:
        model = self._model(collection)
        query = self._apply_filters(model, self.db.query(model), filters)

        try:
            deleted = query.delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Delete from {collection} failed: {str(e)}")
            raise RecordStoreError(f"Delete from {collection} failed") from e

        return deleted

    def _execute_update(self, collection, model, filters, values) -> int:
        query = self._apply_filters(model, self.db.query(model), filters)

        try:
            updated = query.update(values, synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Update of {collection} failed: {str(e)}")
            raise RecordStoreError(f"Update of {collection} failed") from e

        return updated

    def _model(self, collection: str):
        model = self.COLLECTIONS.get(collection)
        if model is None:
            raise RecordStoreError(f"Unknown collection: {collection}")
        return model

    def _column(self, model, column: str):
        if column not in inspect(model).columns:
            raise RecordStoreError(f"Unknown column {column} on {model.__tablename__}")
        return getattr(model, column)

    def _relationship(self, model, name: str):
        if name not in inspect(model).relationships:
            raise RecordStoreError(f"Unknown relationship {name} on {model.__tablename__}")
        return getattr(model, name)

    def _apply_filters(self, model, query, filters: Optional[Mapping[str, Any]]):
        for column, value in (filters or {}).items():
            query = query.filter(self._column(model, column) == value)
        return query

    def _serialize(self, obj, embed: Tuple[str, ...]) -> Dict[str, Any]:
        mapper = inspect(type(obj))
        record = {attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs}

        for name in embed:
            value = getattr(obj, name)
            if mapper.relationships[name].uselist:
                record[name] = [self._serialize(item, ()) for item in value]
            else:
                record[name] = self._serialize(value, ()) if value is not None else None

        return record
