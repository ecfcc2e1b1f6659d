def normalize_label(label):
    """
    ラベルの付加情報を取り除く。最初の '-' か '=' で切り詰める。
    例: 'NP-SBJ-1' -> 'NP', 'PP=2' -> 'PP', '-NONE-' -> ''
    """
    for i, c in enumerate(label):
        if c == '-' or c == '=':
            return label[:i]
    return label


class EquivalenceRegistry:
    """
    同一とみなす文字列のペア（向きなし）を保持する。

    2つの文字列が等価なのは、完全に一致する場合か、同じペアとして登録されている場合のみ。
    推移的には閉じない: (A, B) と (B, C) を登録しても A と C は等価にならない。
    ラベル用 (EQ_LABEL) と単語用 (EQ_WORD) で別々のインスタンスを使う。
    """

    def __init__(self, pairs=()):
        self._pairs = []
        self._lookup = set()
        for a, b in pairs:
            self.add(a, b)

    def add(self, a, b):
        key = frozenset((a, b))
        if key not in self._lookup:
            self._lookup.add(key)
            self._pairs.append((a, b))

    def equivalent(self, a, b):
        if a == b:
            return True
        return frozenset((a, b)) in self._lookup

    def pairs(self):
        return list(self._pairs)

    def __len__(self):
        return len(self._pairs)

    def __repr__(self):
        return f"EquivalenceRegistry({self._pairs!r})"
