"""
Quiz catalogue - paged quiz listing
"""
import logging
from typing import Any, Dict

from quizboard.stores.record_store import RecordStore

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for browsing available quizzes"""
    
    def list_quizzes(self, store: RecordStore, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
        """
        List quizzes, newest first
        
        Args:
            store: Record store
            page: 1-based page number
            page_size: Quizzes per page
            
        Returns:
            Dictionary with items (each with question_count), total, page, page_size
        """
        start = (page - 1) * page_size
        result = store.fetch(
            "quizzes",
            order_by=[("created_at", False), ("title", True)],
            range_=(start, start + page_size - 1),
            embed=("questions",),
            count=True
        )
        
        items = []
        for quiz in result.records:
            questions = quiz.pop("questions", [])
            items.append({**quiz, "question_count": len(questions)})
        
        logger.info(f"Listed quizzes page {page}: {len(items)} of {result.count}")
        
        return {
            "items": items,
            "total": result.count,
            "page": page,
            "page_size": page_size
        }


# Global instance
catalog_service = CatalogService()
