from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from chat_relay.core.exceptions import ConfigurationError

CRM_BASE_URL = "https://iysinfo.com/crmdemo"

# (label, url) is a page, (label, [entries]) is a menu group
PageEntry = Tuple[str, Union[str, Sequence["PageEntry"]]]


def _page(path: str) -> str:
    return f"{CRM_BASE_URL}/{path}"


PAGE_DIRECTORY: list[PageEntry] = [
    ("Dashboard", _page("dashboard")),
    ("Calendar", _page("event")),
    ("Marketing", [
        ("Lead", _page("marketLead")),
        ("LeadSource", _page("aiLeadSource")),
        ("AI Extracted Text", _page("extracted_text")),
        ("Deal", _page("marketDeal")),
    ]),
    ("Project Management", [
        ("Project", [
            ("All Project", _page("project?status=in_progress")),
            ("Project Documentation", _page("projectDocument?status=in_progress")),
        ]),
        ("Schedule", [
            ("Task", _page("project/allTask")),
            ("Timesheets", _page("project/allTimesheet")),
            ("Milestone", _page("milestone/index")),
            ("Gantt Chart", _page("project/ganttChart")),
        ]),
    ]),
    ("Agency", [
        ("Associate", _page("associate")),
        ("Auditor", _page("auditor")),
        ("Authority", _page("authority")),
        ("Client", _page("client")),
        ("Client Firm", _page("clientfirm")),
        ("Employee", _page("employee")),
        ("Vendor", _page("vendors")),
    ]),
    ("HR", [
        ("Attendance", [
            ("Attendance", _page("attendance")),
            ("Bulk Attendance", _page("bulk-attendance")),
            ("Salary Statement", _page("salary-stmnt")),
            ("Holiday", _page("holiday")),
            ("Leave", _page("leave")),
            ("Loan", _page("loan")),
            ("Meeting", _page("meeting")),
            ("Asset", _page("account-assets")),
            ("Document", _page("document-upload")),
            ("Company Policy", _page("company-policy")),
        ]),
        ("HR", [
            ("Award", _page("award")),
            ("Transfer", _page("transfer")),
            ("Resignation", _page("resignation")),
            ("Trip", _page("trip")),
            ("Promotion", _page("promotion")),
            ("Complaints", _page("complaint")),
            ("Warning", _page("warning")),
            ("Termination", _page("termination")),
        ]),
        ("Performance", [
            ("Appraisal", _page("appraisal")),
        ]),
        ("Training", [
            ("Training List", _page("training")),
            ("Trainer", _page("trainer")),
        ]),
    ]),
    ("Store", [
        ("Product & Service", _page("products")),
        ("Issue Request", _page("store/issue-request")),
        ("Return Request", _page("store/return-request")),
    ]),
    ("Sale", [
        ("PreSale", [
            ("Quotation For Clients", _page("estimate")),
            ("Quotation Items", _page("item")),
        ]),
    ]),
    ("Purchase", [
        ("Tender", [
            ("Tender For Vendors", _page("tenderVendor")),
            ("Tender Items", _page("tendorItem")),
        ]),
        ("Budget", _page("budget")),
        ("Pre Purchase", [
            ("Work Order", _page("opentask")),
            ("POs", _page("pos")),
        ]),
        ("Contract", [
            ("Own Contract", _page("own")),
            ("Third Party Contract", _page("contract")),
            ("Sales Contract", _page("sales-contract")),
        ]),
    ]),
    ("Account", [
        ("Banking", [
            ("Account", _page("bank-account")),
            ("Cash", _page("cash")),
            ("Transfer", _page("bank-transfer")),
            ("Beneficiary", _page("beneficiary")),
        ]),
        ("Income", [
            ("Invoices", _page("invoice")),
            ("Revenue", _page("revenue1")),
            ("Credit Notes", _page("creditNote")),
        ]),
        ("Expense", [
            ("Bill", _page("bill")),
            ("Payment", _page("payment")),
            ("Payout", _page("payout")),
            ("Debit Notes", _page("debit-note")),
        ]),
    ]),
    ("Setup", [
        ("Email Template", _page("email_template")),
        ("New Template Type", _page("newTemplate")),
    ]),
    ("Constant", [
        ("HR", [
            ("Department", _page("department")),
            ("Designation", _page("designation")),
            ("Salary Type", _page("salaryType")),
            ("Leave Type", _page("leaveType")),
            ("Award Type", _page("award-type")),
            ("Termination Type", _page("termination-type")),
            ("Training Type", _page("training-type")),
        ]),
        ("Marketing", [
            ("Pipeline", _page("pipeline")),
            ("Lead Stage", _page("leadStage")),
            ("Deal Stage", _page("dealStage")),
            ("Source", _page("source")),
            ("Label", _page("label")),
            ("Auditor Type", _page("auditorType")),
            ("Brand", _page("brand")),
            ("Branch", _page("branches")),
            ("Branch Type", _page("branchtype")),
            ("Category", _page("category")),
            ("Contract Type", _page("contractType")),
            ("Template Type", _page("templateType")),
            ("Payment Method", _page("paymentMethod")),
            ("Task Stage", _page("projectStage")),
            ("Tax Rate", _page("taxRate")),
            ("Unit", _page("unit")),
        ]),
    ]),
    ("Settings", _page("settings")),
    ("Report", [
        ("Attendance", _page("attendance-report")),
        ("Salary Slip", _page("salary-report")),
        ("Task", _page("task-report")),
        ("Time Log", _page("timelog-report")),
        ("Leave", _page("leave-report")),
        ("Finance", _page("finance-report")),
        ("Income Vs Expense", _page("income-expense-report")),
        ("Invoice", _page("invoice-report")),
        ("Client", _page("client-report")),
        ("Notes", _page("note")),
        ("Support", _page("support")),
    ]),
]

DASHBOARD_LINK = f"[Dashboard]({_page('dashboard')})"

UNRELATED_REPLY = (
    "I'm sorry, I can only assist with CRM-related tasks. "
    f"Try navigating to a page like {DASHBOARD_LINK} to get started."
)


def render_directory(entries: Sequence[PageEntry], depth: int = 0) -> str:
    lines = []
    indent = "  " * depth
    for label, target in entries:
        if isinstance(target, str):
            lines.append(f"{indent}- {label}: {target}")
        else:
            lines.append(f"{indent}- {label}")
            lines.append(render_directory(target, depth + 1))
    return "\n".join(lines)


def iter_pages(entries: Sequence[PageEntry] = PAGE_DIRECTORY, trail: Tuple[str, ...] = ()):
    """Yield ``(breadcrumb, url)`` for every page, e.g. ``("Report > Salary Slip", url)``."""
    for label, target in entries:
        path = trail + (label,)
        if isinstance(target, str):
            yield " > ".join(path), target
        else:
            yield from iter_pages(target, path)


def build_crm_system_prompt(entries: Sequence[PageEntry] = PAGE_DIRECTORY) -> str:
    return f"""You are a helpful assistant for a CRM system at {CRM_BASE_URL}/. Your primary task is to assist users by answering questions about the CRM system and guiding them to specific pages when requested. Follow these guidelines:

1. **Navigation Requests**: If the user asks to navigate to a page (e.g., "go to dashboard", "take me to marketing"), suggest the appropriate page with a link in the format [Display Text](URL).
2. **General CRM Questions**: If the user asks a general question about the CRM system (e.g., "what does the dashboard do?", "how can I manage my marketing campaigns?"), provide a concise answer and, if relevant, suggest a page with a link in the format [Display Text](URL).
3. **Unrelated Questions**: If the user asks something unrelated to the CRM system (e.g., "what's the weather like?"), respond with: "{UNRELATED_REPLY}"

Available pages and their URLs (organized by category):
{render_directory(entries)}

Additional Information:
- The Dashboard provides an overview of key metrics such as sales performance, project status, and recent activities. It helps users quickly assess the health of their business operations.
- The Calendar allows users to view and manage scheduled events, meetings, and deadlines.
- The Marketing > Lead section helps users manage potential customers and track lead progress.
- The Project Management > Project > All Project section lists all ongoing projects, allowing users to monitor progress and manage tasks.

Examples:
- If the user says "go to dashboard", respond with: "You can go to the dashboard by clicking on this link: {DASHBOARD_LINK}"
- If the user says "what does the dashboard do?", respond with: "The Dashboard provides an overview of key metrics such as sales performance, project status, and recent activities. You can access it here: {DASHBOARD_LINK}"
- If the user says "how can I manage my marketing campaigns", respond with: "You can manage your marketing campaigns by creating a deal in the [Marketing > Deal]({_page('marketDeal')}) section."
- If the user says "what are the benefits of the dashboard for customers?", respond with: "The Dashboard helps customers by providing a quick overview of their business metrics, such as sales performance and project status, enabling better decision-making. You can access it here: {DASHBOARD_LINK}"
- If the user says "where can I see my salary slip", respond with: "You can view your salary slip in the [Report > Salary Slip]({_page('salary-report')}) section."
- If the user says "what's the weather like?", respond with: "{UNRELATED_REPLY}"
"""


CRM_SYSTEM_PROMPT = build_crm_system_prompt()


def load_system_prompt(path: Optional[Path] = None) -> str:
    """Return the prompt text from ``path``, or the built-in CRM prompt."""
    if path is None:
        return CRM_SYSTEM_PROMPT
    text = Path(path).read_text(encoding="utf-8").strip()
    if not text:
        raise ConfigurationError(f"System prompt file is empty: {path}")
    return text
