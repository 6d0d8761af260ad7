from datetime import datetime
from app.core.config import LOGS_DIR


def write_audit_log(actor_name: str, actor_role: str, action: str, details: str = ""):
    """Append one line to the monthly audit file (logs/audit_YYYY_MM.log)."""
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    month_str = datetime.now().strftime("%Y_%m")
    log_file = LOGS_DIR / f"audit_{month_str}.log"
    ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    with open(log_file, "a", encoding="utf-8") as f:
        f.write(f"{ts} | {actor_role} | {actor_name} | {action} | {details}\n")
