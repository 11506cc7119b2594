"""Arithmetic on a pair of integers."""

from lazyprops import extensible, lazy_prop


@extensible
class Things:
    def __init__(self, a: int, b: int) -> None:
        self.a = a
        self.b = b

    @lazy_prop("Sum", thread_safe=True)
    def get_sum(self) -> int:
        return self.a + self.b

    @lazy_prop("Diff", thread_safe=True, field_prefix="_diff")
    def get_diff(self) -> int:
        return self.a - self.b

    @lazy_prop("SumPlusDiff", thread_safe=True)
    @lazy_prop("SumPlusDiff2", thread_safe=True)
    def get_sum_plus_diff(self) -> int:
        return self.Sum + self.Diff
