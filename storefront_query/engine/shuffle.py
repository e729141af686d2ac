"""Fisher-Yates shuffle (주입 가능한 난수원)"""

from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def shuffled(items: Sequence[T], rng: Optional[random.Random] = None) -> list[T]:
    """원본을 건드리지 않고 섞은 새 리스트 반환

    Args:
        items: 섞을 항목
        rng: 난수원. 테스트에서는 random.Random(seed) 를 넘겨 결정적으로 만듭니다.
    """
    rng = rng or random.Random()
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result
