from dataclasses import dataclass, fields, replace
from typing import Union


def f_score(precision: float, recall: float) -> float:
    """Harmonic mean of precision and recall, 0 if both are 0.
    """
    if precision + recall == 0:
        return 0.0
    return 2.0 * precision * recall / (precision + recall)


class _FieldwiseArithmetic:
    # Support for summing and averaging records, e.g. over the slices of a stack.
    # Note that the averaged precision, recall and f-score are macro averages as well.
    def __add__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return replace(self, **{field.name: getattr(self, field.name) + getattr(other, field.name)
                                for field in fields(self)})

    def __truediv__(self, divisor):
        return replace(self, **{field.name: getattr(self, field.name) / divisor for field in fields(self)})


@dataclass(frozen=True)
class ClassificationStatistics(_FieldwiseArithmetic):
    """Pair counting statistics for the Rand index family.

    The positives refer to pixel pairs that are in the same object.
    """
    true_positives: float
    true_negatives: float
    false_positives: float
    false_negatives: float
    metric_value: float
    precision: float
    recall: float
    f_score: float


@dataclass(frozen=True)
class InformationStatistics(_FieldwiseArithmetic):
    """Entropy based statistics for the variation of information family.

    `a` refers to the groundtruth and `b` to the segmentation.
    """
    entropy_a: float
    entropy_b: float
    conditional_a_given_b: float
    conditional_b_given_a: float
    variation_of_information: float
    precision: float
    recall: float
    f_score: float

    @property
    def metric_value(self) -> float:
        return self.variation_of_information

    @property
    def split(self) -> float:
        """The split (over-segmentation) part of the variation of information.
        """
        return self.conditional_b_given_a

    @property
    def merge(self) -> float:
        """The merge (under-segmentation) part of the variation of information.
        """
        return self.conditional_a_given_b


Statistics = Union[ClassificationStatistics, InformationStatistics]
