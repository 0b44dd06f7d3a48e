"""Retention and archival of session partitions."""

from logsync.retention.archiver import Archiver
from logsync.retention.partitions import Partition, iter_partitions
from logsync.retention.pruner import RetentionPruner

__all__ = ["Archiver", "Partition", "RetentionPruner", "iter_partitions"]
