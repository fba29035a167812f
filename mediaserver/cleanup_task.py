"""Background task that finds files no index record references."""

import asyncio
import time
from pathlib import Path
from typing import Dict, List, Sequence

from common.logging_config import get_logger
from mediaserver.exceptions import IndexCorruptError
from mediaserver.services.collection_service import CollectionService

logger = get_logger(__name__)


class OrphanedFileScanner:
    """
    Periodically compares each collection directory with its index.

    A crash between writing an upload and appending its record leaves a file
    nothing points at. Orphans are logged, and removed only when
    delete_orphans is set.
    """

    def __init__(
        self,
        services: Sequence[CollectionService],
        interval_seconds: int,
        grace_seconds: int = 3600,
        delete_orphans: bool = False,
    ):
        """
        Args:
            services: Collections to scan
            interval_seconds: Time between scans
            grace_seconds: Files modified more recently than this are skipped,
                so uploads still being indexed are left alone
            delete_orphans: Remove orphans instead of only reporting them
        """
        self.services = list(services)
        self.interval_seconds = interval_seconds
        self.grace_seconds = grace_seconds
        self.delete_orphans = delete_orphans
        self._running = False
        self._task = None

    async def start(self) -> None:
        """Start the background scan loop."""
        if self._running:
            logger.warning("Orphan scanner already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Started orphaned file scanner (interval: {self.interval_seconds}s, "
            f"delete: {self.delete_orphans})"
        )

    async def stop(self) -> None:
        """Stop the background scan loop."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info("Stopped orphaned file scanner")

    async def _run(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await asyncio.to_thread(self.scan_once)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in orphan scan: {e}", exc_info=True)

    def scan_once(self) -> Dict[str, List[Path]]:
        """
        Run one scan over every collection.

        Returns:
            Orphaned file paths keyed by collection item name
        """
        report = {}
        for service in self.services:
            orphans = self.find_orphans(service)
            report[service.item_name] = orphans

            for path in orphans:
                if self.delete_orphans:
                    try:
                        path.unlink()
                        logger.info(f"Removed orphaned {service.item_name} file {path.name}")
                    except FileNotFoundError:
                        pass
                    except OSError as e:
                        logger.warning(f"Failed to remove orphaned file {path}: {e}")
                else:
                    logger.warning(f"Orphaned {service.item_name} file: {path.name}")

        return report

    def find_orphans(self, service: CollectionService) -> List[Path]:
        """
        List files in a collection's directory that no record references.

        Nothing is reported when the index cannot be decoded or holds no
        records: a damaged or missing index would otherwise make every stored
        file look unreferenced.
        """
        try:
            records = service.store.load(strict=True)
        except IndexCorruptError as e:
            logger.warning(f"Skipping orphan scan of {service.item_name} files: {e}")
            return []
        if not records:
            logger.debug(f"Skipping orphan scan of {service.item_name} files: index has no records")
            return []

        referenced = {record.storage_path for record in records}
        cutoff = time.time() - self.grace_seconds

        orphans = []
        for path in service.storage.list_files():
            name = path.name
            if service.store.is_reserved_name(name) or name in referenced:
                continue
            try:
                if path.stat().st_mtime > cutoff:
                    continue
            except FileNotFoundError:
                continue
            orphans.append(path)
        return orphans
