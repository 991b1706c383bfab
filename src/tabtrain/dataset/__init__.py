"""Dataset preparation: task, labels, shuffle, encoding and split."""

from .preparer import (
    DatasetPreparer,
    PreparedDataset,
    build_label_map,
    compute_class_weights,
    determine_task,
    encode_labels,
    prepare_dataset,
    shuffle_rows,
    split_index,
)

__all__ = [
    "DatasetPreparer",
    "PreparedDataset",
    "build_label_map",
    "compute_class_weights",
    "determine_task",
    "encode_labels",
    "prepare_dataset",
    "shuffle_rows",
    "split_index",
]
