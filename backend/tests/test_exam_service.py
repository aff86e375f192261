"""
Tests for exam lookup caching
"""
from examguard.core.cache import CacheManager
from examguard.models import Exam as ExamModel
from examguard.services.exam_service import ExamService


class MemoryCache(CacheManager):
    """CacheManager backed by a dict instead of Redis"""

    def __init__(self):
        super().__init__(enabled=True)
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ttl=None):
        self.store[key] = self._deserialize_value(self._serialize_value(value))
        return True


def test_exam_is_served_from_cache_after_first_read(db, add_exam):
    exam = add_exam(exam_id="cached-exam")
    cache = MemoryCache()
    service = ExamService(db, cache=cache)

    first = service.get_exam("cached-exam")
    db.query(ExamModel).filter(ExamModel.id == exam.id).delete()
    db.commit()
    second = service.get_exam("cached-exam")

    assert "exam:cached-exam" in cache.store
    assert second == first


def test_missing_exam_is_not_cached(db):
    cache = MemoryCache()

    assert ExamService(db, cache=cache).get_exam("nope") is None
    assert cache.store == {}


def test_disabled_cache_is_a_miss():
    cache = CacheManager(enabled=False)

    assert cache.set("k", {"a": 1}) is False
    assert cache.get("k") is None
    assert cache.health_check() is False
