"""
Notification Content Templates

All reminder copy (on-device alerts, push, email) lives here so wording can
change without touching scheduling or delivery logic.
"""

from html import escape


def _days(n: int) -> str:
    return f"{n} day{'' if n == 1 else 's'}"


class AlertContent:
    """On-device alert copy, used by ReminderScheduler."""

    TEST_TITLE = "PlantCare"
    TEST_BODY = "Notifications are working!"

    @staticmethod
    def title(plant_name: str) -> str:
        return f"Time to water {plant_name}"

    @staticmethod
    def overdue_body(plant_name: str, location: str, days_overdue: int) -> str:
        return f"{plant_name}{AlertContent._where(location)} is {_days(max(days_overdue, 1))} overdue for watering"

    @staticmethod
    def due_body(plant_name: str, location: str) -> str:
        # Calendar alerts fire on the due date itself
        return f"{plant_name}{AlertContent._where(location)} needs watering today"

    @staticmethod
    def _where(location: str) -> str:
        return f" in {location}" if location else ""


class WateringReminderContent:
    """Server-side reminder copy for push and email."""

    @staticmethod
    def title(plant_name: str) -> str:
        return f"🪴 PlantCare: {plant_name} needs water!"

    @staticmethod
    def message(plant_name: str, location: str, days_overdue: int, urgent: bool) -> str:
        where = f" in {location}" if location else ""
        if urgent:
            return f"Your {plant_name}{where} is {_days(days_overdue)} overdue for watering!"
        return f"Time to water your {plant_name}{where}"

    @staticmethod
    def email_subject(plant_name: str, days_overdue: int, urgent: bool) -> str:
        if urgent:
            return f"🚨 PlantCare: {plant_name} urgently needs water ({_days(days_overdue)} overdue)!"
        return f"🪴 PlantCare: Time to water your {plant_name}"

    @staticmethod
    def email_html(message: str, app_url: str) -> str:
        return (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
            '<h2 style="color: #2c974b; margin-top: 0;">Plant Watering Reminder</h2>'
            f'<p style="font-size: 16px;">{escape(message)}</p>'
            f'<p>Log in to <a href="{escape(app_url)}">PlantCare</a> to mark this plant as watered.</p>'
            "</div>"
        )

    @staticmethod
    def email_text(message: str, app_url: str) -> str:
        return (
            "PLANT WATERING REMINDER\n\n"
            f"{message}\n\n"
            f"Log in to PlantCare to mark this plant as watered: {app_url}\n"
        )


class SummaryContent:
    TITLE = "🪴 PlantCare Daily Summary"

    @staticmethod
    def message(plant_count: int) -> str:
        return f"You have {plant_count} plants that need watering today."


class SelfTestContent:
    TITLE = "🪴 PlantCare: Test Notification"
    MESSAGE = (
        "This is a test notification from PlantCare. If you received this, "
        "your notifications are configured correctly!"
    )
    EMAIL_SUBJECT = "🪴 PlantCare: Test Notification"
