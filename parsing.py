from data import BracketSpan, ParsedSentence, SentenceError, Terminal


class ParseError(SentenceError):
    """括弧表記の一行が読めない (不正な文字、括弧の対応がとれない等)。"""


def _is_terminator(c):
    return c.isspace() or c == '(' or c == ')'


def _read_token(line, pos):
    """pos から終端文字 (空白, '(', ')') の直前までを読み、(token, 次の位置) を返す。"""
    end = pos
    n = len(line)
    while end < n and not _is_terminator(line[end]):
        end += 1
    return line[pos:end], end


def parse_line(line, delete_labels=(), delete_labels_for_length=()):
    """
    括弧表記の一行 '(S (NP (NNX this)) (VP ...))' を読み、終端記号列と括弧のリストを作る。

    一回の左から右への走査で、開き括弧の位置をスタックで管理する。
    品詞 (pre-terminal) の '(LABEL WORD)' は終端記号になり、それ以外の '(' は括弧になる。

    Args:
        line (str): 一文分の括弧表記
        delete_labels (set): このラベルを持つ品詞は単語ごと取り除く
        delete_labels_for_length (set): このラベルを持つ品詞は文長 (raw_length) に数えない

    Returns:
        ParsedSentence: terminals, brackets (開き括弧の順), raw_length

    Raises:
        ParseError: 不正な入力の場合
    """
    sentence = ParsedSentence()
    terminals = sentence.terminals
    brackets = sentence.brackets
    # 開いている括弧のスタック。brackets には開いた順に並ぶ
    stack = []

    pos = 0
    n = len(line)
    while pos < n:
        c = line[pos]

        if c.isspace():
            pos += 1

        # --- 開き括弧 ---
        elif c == '(':
            label, pos = _read_token(line, pos + 1)

            # 終端記号 (LABEL WORD) かどうかを先読みする
            if pos < n and line[pos].isspace():
                q = pos
                while q < n and line[q].isspace():
                    q += 1
                word, q = _read_token(line, q)

                if q < n and line[q] == ')':
                    if label not in delete_labels_for_length:
                        sentence.raw_length += 1
                    if label not in delete_labels:
                        terminals.append(Terminal(word, label))
                    pos = q + 1
                    continue
                if word and not (q < n and line[q] == '('):
                    raise ParseError("More than two elements in a bracket")

            # それ以外は非終端記号の括弧
            span = BracketSpan(start=len(terminals), end=-1, label=label)
            stack.append(span)
            brackets.append(span)

        # --- 閉じ括弧 ---
        elif c == ')':
            if not stack:
                raise ParseError("Bracketing unbalance (too many close bracket)")
            stack.pop().end = len(terminals)
            pos += 1

        else:
            raise ParseError("Reading sentence")

    if stack:
        raise ParseError("Bracketing is unbalanced (too many open bracket)")

    return sentence
