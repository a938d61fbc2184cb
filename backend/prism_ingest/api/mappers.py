"""
Mappers between domain objects and DTOs.
Separates domain layer from API layer.
"""
from pathlib import Path
from typing import Iterable, List

from .dto import FolderStatusDTO, IngestionSummaryDTO
from ..domain.entities import IngestionResult, IngestionStatus
from ..domain.value_objects import SUPPORTED_EXTENSIONS


class IngestionResultMapper:
    """Maps pipeline results to IngestionSummaryDTO."""
    
    @staticmethod
    def flatten(results: Iterable[IngestionResult]) -> List[IngestionResult]:
        flat = []
        for result in results:
            flat.append(result)
            flat.extend(IngestionResultMapper.flatten(result.children))
        return flat
    
    @staticmethod
    def to_summary(results: List[IngestionResult]) -> IngestionSummaryDTO:
        """Attachment results are counted alongside the files they came from."""
        flat = IngestionResultMapper.flatten(results)
        
        def count(*statuses: IngestionStatus) -> int:
            return sum(1 for r in flat if r.status in statuses)
        
        return IngestionSummaryDTO(
            total_files=len(results),
            created=count(IngestionStatus.CREATED),
            duplicates=count(IngestionStatus.DUPLICATE),
            skipped=count(IngestionStatus.IGNORED, IngestionStatus.EMPTY),
            failed=count(IngestionStatus.FAILED),
            record_ids=[rid for r in results for rid in r.created_ids()],
            results=[r.to_dict() for r in results],
        )


class FolderStatusMapper:
    """Maps a folder path to FolderStatusDTO."""
    
    @staticmethod
    def to_dto(folder) -> FolderStatusDTO:
        if not folder:
            return FolderStatusDTO(folder=None, exists=False, file_count=0)
        path = Path(folder)
        try:
            exists = path.is_dir()
            count = sum(
                1 for p in path.iterdir()
                if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
            ) if exists else 0
        except OSError:
            # Folder vanished or became unreadable between checks
            return FolderStatusDTO(folder=str(path), exists=False, file_count=0)
        return FolderStatusDTO(folder=str(path), exists=exists, file_count=count)
