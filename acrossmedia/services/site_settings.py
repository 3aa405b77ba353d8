from sqlalchemy.orm import Session
from acrossmedia.models.site_setting import SiteSetting, SITE_SETTINGS_TYPE


def get_site_settings(db: Session, create: bool = True) -> SiteSetting | None:
    """Return the singleton settings row, creating it with defaults on first use when `create`."""
    row = db.query(SiteSetting).filter(SiteSetting.type == SITE_SETTINGS_TYPE).first()
    if row is None and create:
        row = SiteSetting(type=SITE_SETTINGS_TYPE)
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def email_notifications_enabled(db: Session) -> bool:
    row = get_site_settings(db, create=False)
    return True if row is None else bool(row.email_notifications)
