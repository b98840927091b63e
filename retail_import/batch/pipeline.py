"""
Batch import pipeline orchestration.

Coordinates the flow: read CSV → stage → coerce → load → reclaim staging
"""

import time
from pathlib import Path

from retail_import.batch.readers import CSVReader
from retail_import.core.coercion import CoercionBatch, RecordCoercer
from retail_import.core.models import ImportResult, PipelineState
from retail_import.core.schema import ImportConfig
from retail_import.exceptions import ImportPipelineError
from retail_import.observability import metrics
from retail_import.observability.logger import get_logger, log_operation
from retail_import.warehouse import BaseConnectionPool, SalesWriter, SchemaManager, StagingArea

logger = get_logger(__name__)


class ImportPipeline:
    """
    Orchestrates one retail sales import.

    Flow:
    1. Read the CSV and replace the staging table contents (EMPTY -> STAGED)
    2. Coerce staged rows into typed sales records (STAGED -> COERCED)
    3. Upsert the records into the target table (COERCED -> LOADED)
    4. Clear the staging table (LOADED -> EMPTY)

    A failure in steps 2 or 3 leaves the staging table as it is so the rows
    can be inspected. Nothing is retried. The pipeline is synchronous and a
    run must not overlap with another run against the same tables.
    """

    def __init__(self, pool: BaseConnectionPool, config: ImportConfig | None = None):
        """
        Initialize import pipeline.

        Args:
            pool: Open store connection pool
            config: Import configuration (defaults apply when omitted)
        """
        self.pool = pool
        self.config = config or ImportConfig()

        columns = self.config.columns
        self.reader = CSVReader(
            columns=columns,
            delimiter=self.config.csv.delimiter,
            encoding=self.config.csv.encoding,
        )
        self.coercer = RecordCoercer(columns=columns, date_formats=self.config.date_formats)
        self.schema_manager = SchemaManager(pool, tables=self.config.tables, columns=columns)
        self.staging = StagingArea(pool, table=self.config.tables.staging, columns=columns)
        self.writer = SalesWriter(pool, table=self.config.tables.target, columns=columns)

        self.state = PipelineState.EMPTY

    def _transition(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state {self.state.value} -> {state.value}")
        self.state = state

    def stage(self, csv_path: str | Path) -> int:
        """
        Read the CSV file and load it into the staging table.

        The file is fully read and checked before the staging table is
        touched; the staging load itself is a single transaction.

        Returns:
            Number of rows staged

        Raises:
            ResourceError: If the CSV or the store cannot be accessed
            SchemaMismatchError: If the CSV does not match the column table
        """
        records = self.reader.read(csv_path)
        logger.info(f"Read {len(records)} rows from {csv_path}")

        count = self.staging.replace(records)
        metrics.rows_staged_total.inc(count)
        self._transition(PipelineState.STAGED)
        return count

    def coerce(self) -> CoercionBatch:
        """
        Coerce every staged row into a SalesRecord.

        Returns:
            CoercionBatch with the records and per-column null counts
        """
        raws = self.staging.fetch()
        batch = self.coercer.coerce_batch(raws)

        metrics.record_null_counts(batch.empty_values, batch.unparseable_values)
        logger.info(
            f"Coerced {len(batch)} rows",
            extra={
                "row_count": len(batch),
                "empty_values": dict(batch.empty_values),
                "unparseable_values": dict(batch.unparseable_values),
            },
        )
        self._transition(PipelineState.COERCED)
        return batch

    def load(self, batch: CoercionBatch) -> int:
        """
        Upsert coerced records into the target table.

        Raises:
            LoadFailure: If the batch is rejected (staging is retained)
        """
        count = self.writer.upsert_batch(batch.records)
        metrics.records_loaded_total.inc(count)
        self._transition(PipelineState.LOADED)
        return count

    def reclaim(self) -> None:
        """Empty the staging table. Safe to call when it is already empty."""
        self.staging.truncate()
        self._transition(PipelineState.EMPTY)

    def run(
        self,
        csv_path: str | Path,
        reclaim_staging: bool = True,
        create_tables: bool = True,
    ) -> ImportResult:
        """
        Run the full import for one CSV file.

        Args:
            csv_path: Path to the sales CSV
            reclaim_staging: Clear staging after a successful load
            create_tables: Create the staging and target tables if missing

        Returns:
            ImportResult summarising the run

        Raises:
            ResourceError, SchemaMismatchError, LoadFailure
        """
        start = time.time()
        status = "error"
        try:
            with log_operation("Retail sales import", logger=logger, csv_path=str(csv_path)):
                if create_tables:
                    self.schema_manager.ensure_tables()

                rows_staged = self.stage(csv_path)
                batch = self.coerce()
                records_loaded = self.load(batch)
                if reclaim_staging:
                    self.reclaim()
            status = "success"
        except ImportPipelineError:
            if self.state in (PipelineState.STAGED, PipelineState.COERCED):
                logger.warning(
                    "Staging table retained for inspection",
                    extra={"table": self.staging.table, "state": self.state.value},
                )
            raise
        finally:
            metrics.record_import_run(status, time.time() - start)

        return ImportResult(
            csv_path=str(csv_path),
            rows_staged=rows_staged,
            records_loaded=records_loaded,
            empty_values=dict(batch.empty_values),
            unparseable_values=dict(batch.unparseable_values),
            final_state=self.state,
            duration_seconds=round(time.time() - start, 3),
        )
