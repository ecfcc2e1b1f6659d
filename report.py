import io

import wandb
from nltk import Tree
from sklearn.metrics import classification_report

from data import MatchState
from summary import Status

RULE = "=" * 76


def format_header():
    return "\n".join([
        "  Sent.                        Matched  Bracket   Cross        Correct Tag",
        " ID  Len.  Stat. Recal  Prec.  Bracket gold test Bracket Words  Tags Accracy",
        RULE,
    ])


def format_sentence(result):
    """一文分の結果を一行にする。"""
    return (f"{result.index:4d}  {result.raw_length:3d}    {result.status.value:d}  "
            f"{result.recall:6.2f} {result.precision:6.2f}   {result.match:3d}    "
            f"{result.gold_count:3d}  {result.test_count:3d}    {result.crossing:3d}"
            f"   {result.words:4d}  {result.correct_tags:4d}   {result.tagging_accuracy:6.2f}")


def _terminal_cell(i, terminal):
    return f"{i:3d} : {terminal.state.value:d} : {terminal.label:<6s}  {terminal.word:<16s}"


def _bracket_cell(i, span):
    return f"{i:3d} : {span.state.value:d} : {span.start:3d}  {span.end:3d}  {span.label:<6s}"


def _side_by_side(left, right, width):
    lines = []
    for i in range(max(len(left), len(right))):
        l = left[i] if i < len(left) else ""
        r = right[i] if i < len(right) else ""
        lines.append((l.ljust(width) + "      " + r).rstrip())
    return lines


def format_debug(result):
    """
    デバッグ用に、gold (<1>) と test (<2>) の終端記号と括弧を状態付きで左右に並べる。
    状態の数値: 0 不一致, 1 一致, 5 削除, 9 未定義
    """
    gold, test = result.gold, result.test
    gold_terminals = gold.terminals if gold is not None else []
    test_terminals = test.terminals if test is not None else []
    gold_brackets = gold.brackets if gold is not None else []
    test_brackets = test.brackets if test is not None else []

    lines = [f"-<1>---(wn1={len(gold_terminals):3d}, bn1={len(gold_brackets):3d})-           "
             f"-<2>---(wn2={len(test_terminals):3d}, bn2={len(test_brackets):3d})-"]
    lines += _side_by_side([_terminal_cell(i, t) for i, t in enumerate(gold_terminals)],
                           [_terminal_cell(i, t) for i, t in enumerate(test_terminals)], 34)
    lines.append("")
    lines += _side_by_side([_bracket_cell(i, b) for i, b in enumerate(gold_brackets)],
                           [_bracket_cell(i, b) for i, b in enumerate(test_brackets)], 26)
    lines.append("")
    lines.append("========")
    return "\n".join(lines)


def format_bracket_errors(result):
    """
    gold にあるのに見つからなかった括弧と、test にしかない余計な括弧を列挙する。
    end は元の evalb に合わせて最後の単語の位置 (end - 1) で出す。
    """
    lines = []
    if result.status is not Status.OK:
        return lines
    for b in result.test.brackets:
        if b.state is MatchState.UNMATCHED:
            lines.append(f"produced spurious bracket {b.label} {b.start} {b.end - 1}")
    for b in result.gold.brackets:
        if b.state is MatchState.UNMATCHED:
            lines.append(f"didn't recall gold bracket {b.label} {b.start} {b.end - 1}")
    return lines


def render_tree(line):
    """nltk で木を描画する。nltk が読めない行はそのまま返す。"""
    try:
        tree = Tree.fromstring(line)
    except ValueError:
        return line
    out = io.StringIO()
    tree.pretty_print(stream=out)
    return out.getvalue().rstrip("\n")


def _format_block(title, aggregate):
    return "\n".join([
        "",
        title,
        f"Number of sentence        = {aggregate.sentences:6d}",
        f"Number of Error sentence  = {aggregate.error_sentences:6d}",
        f"Number of Skip  sentence  = {aggregate.skip_sentences:6d}",
        f"Number of Valid sentence  = {aggregate.valid_sentences:6d}",
        f"Bracketing Recall         = {aggregate.recall:6.2f}",
        f"Bracketing Precision      = {aggregate.precision:6.2f}",
        f"Bracketing FMeasure       = {aggregate.f_measure:6.2f}",
        f"Complete match            = {aggregate.complete_match:6.2f}",
        f"Average crossing          = {aggregate.average_crossing:6.2f}",
        f"No crossing               = {aggregate.no_crossing:6.2f}",
        f"2 or less crossing        = {aggregate.two_or_less_crossing:6.2f}",
        f"Tagging accuracy          = {aggregate.tagging_accuracy:6.2f}",
    ])


def format_totals(summary):
    total = summary.all
    line = ""
    # 括弧が片方でも0なら括弧の列は空けておく
    if total.gold_brackets > 0 and total.test_brackets > 0:
        line += (f"                {total.recall:6.2f} {total.precision:6.2f} "
                 f"{total.matched_brackets:6d} {total.gold_brackets:5d} {total.test_brackets:5d}  "
                 f"{total.no_crossing_sentences:5d}")
    line += f"  {total.words:5d} {total.correct_tags:5d}   {total.tagging_accuracy:6.2f}"

    return "\n".join([
        RULE,
        line,
        "=== Summary ===",
        _format_block("-- All --", summary.all),
        _format_block(f"-- len<={summary.cutoff_len} --", summary.cutoff),
    ])


class TagConfusion:
    """
    OK の文から gold / test の品詞の組を集め、品詞ごとの詳細なレポートを作る。
    等価な品詞 (EQ_LABEL) は gold 側の品詞に寄せてから数える。
    """

    def __init__(self, label_equivalences=None):
        self.label_equivalences = label_equivalences
        self.gold_tags = []
        self.test_tags = []

    def add(self, result):
        if result.status is not Status.OK:
            return
        for gold_tag, test_tag in zip(result.gold.tags(), result.test.tags()):
            if self.label_equivalences is not None and self.label_equivalences.equivalent(gold_tag, test_tag):
                test_tag = gold_tag
            self.gold_tags.append(gold_tag)
            self.test_tags.append(test_tag)

    def report(self):
        if not self.gold_tags:
            return "No data available to generate a report."
        # gold と test のどちらかに出現した品詞だけをレポート対象にする
        present_labels = sorted(set(self.gold_tags) | set(self.test_tags))
        return classification_report(
            y_true=self.gold_tags,
            y_pred=self.test_tags,
            labels=present_labels,
            digits=4,
            zero_division=0
        )


def log_summary_to_wandb(summary, project, config=None):
    """コーパス全体の結果を wandb の run summary に記録する。"""
    wandb.init(project=project, config=config.as_dict() if config is not None else None)
    for view, aggregate in (("all", summary.all), (f"len<={summary.cutoff_len}", summary.cutoff)):
        for name, value in aggregate.metrics().items():
            wandb.summary[f"{view}/{name}"] = value
    wandb.summary["error_count"] = summary.error_count
    wandb.finish()
