"""Render a ScanContext as a DingTalk markdown message.

DingTalk markdown supports headings, links, images and ``<font color>``;
lines need a blank line between them to render as separate paragraphs.
"""

from dataclasses import dataclass

from sonar_notify.models import Measures, ScanContext

SUCCESS_IMAGE = "http://s1.ax1x.com/2020/10/29/BGMeTe.png"
FAILURE_IMAGE = "http://s1.ax1x.com/2020/10/29/BGMZwD.png"

SUCCESS_COLOR = "#008000"
FAILURE_COLOR = "#FF0000"


@dataclass(frozen=True)
class Message:
    title: str
    text: str
    msgtype: str = "markdown"

    def to_payload(self) -> dict:
        return {
            "msgtype": self.msgtype,
            self.msgtype: {"title": self.title, "text": self.text},
        }


def _percent(value: str) -> str:
    return f"{value}%" if value else ""


def _link(label: str, url: str) -> str:
    return f"[{label}]({url})" if url else label


def _metric_lines(m: Measures, new_code: bool) -> list[str]:
    if new_code:
        counts = (m.new_bugs, m.new_vulnerabilities, m.new_code_smells)
        percents = (m.new_coverage, m.new_duplicated_lines_density)
        prefix = "新增"
    else:
        counts = (m.bugs, m.vulnerabilities, m.code_smells)
        percents = (m.coverage, m.duplicated_lines_density)
        prefix = ""
    bugs, vulnerabilities, code_smells = counts
    coverage, duplicated = percents
    return [
        f"{prefix}Bugs: {bugs} | {prefix}漏洞: {vulnerabilities} | {prefix}异味: {code_smells}",
        f"覆盖率: {_percent(coverage)} | 重复率: {_percent(duplicated)}",
    ]


def render_markdown(
    ctx: ScanContext,
    *,
    multi_branch: bool = False,
    success_image: str = SUCCESS_IMAGE,
    failure_image: str = FAILURE_IMAGE,
) -> Message:
    """Format *ctx* as a markdown message. Never raises.

    With *multi_branch* the links point at the branch result page reported
    by the webhook; otherwise at the project dashboard, since Community
    Edition only analyses one branch.
    """
    title = f"{ctx.project_name}[{ctx.branch_name}]代码扫描报告"
    result_url = ctx.branch_url if multi_branch else ctx.dashboard_url

    if ctx.passed:
        image, color, status = success_image, SUCCESS_COLOR, "通过"
    else:
        image, color, status = failure_image, FAILURE_COLOR, "未通过"

    branch_label = "PR" if ctx.is_pull_request else "分支"

    lines = [
        f"### {title}",
        f"![{status}]({image})",
        f"**质量阈**: <font color=\"{color}\">{status}</font>",
        f"**项目**: {_link(ctx.project_name or ctx.project_key, ctx.project_url or result_url)}",
        f"**{branch_label}**: {_link(ctx.branch_name or '-', result_url)}",
        "#### 新代码",
        *_metric_lines(ctx.measures, new_code=True),
        "#### 整体",
        *_metric_lines(ctx.measures, new_code=False),
        _link("查看详情", result_url),
    ]
    return Message(title=title, text="\n\n".join(lines))
