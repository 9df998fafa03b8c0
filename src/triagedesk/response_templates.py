"""Summary: Customer reply template packs per category.

Importance: Gives agents a starting reply that matches the triaged category.
Alternatives: Require agents to write every reply from scratch.
"""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, replace
from typing import Mapping

from triagedesk.categories import UNKNOWN, normalize_category

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}|\{([^{}]+)\}")

SIGN_OFF = """
Best regards,
{{agent_name}}
{{company_name}} Support"""


@dataclass(frozen=True)
class ResponseTemplate:
    """Summary: A named reply with subject and body placeholders.

    Importance: Placeholders such as ``{{customer_name}}`` are filled per reply.
    Alternatives: Render with a full templating engine such as Jinja2.
    """

    name: str
    subject: str
    body: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "subject": self.subject, "body": self.body}


def _template(name: str, subject: str, body: str) -> ResponseTemplate:
    return ResponseTemplate(
        name=name,
        subject=subject,
        body=textwrap.dedent(body).strip() + "\n" + SIGN_OFF,
    )


RESPONSE_TEMPLATES: dict[str, list[ResponseTemplate]] = {
    "Billing Issue": [
        _template(
            "Refund Request",
            "Re: Your Refund Request",
            """
            Hi {{customer_name}},

            Thank you for reaching out about your refund request.

            I've reviewed your account and can confirm that your refund of {{amount}} has been
            processed. You should see the credit on your original payment method within 5-10
            business days.

            If you don't see the refund after 10 business days, please reply to this email and
            I'll investigate further.
            """,
        ),
        _template(
            "Billing Clarification",
            "Re: Your Billing Question",
            """
            Hi {{customer_name}},

            Thank you for contacting us about your recent charge.

            The charge of {{amount}} on {{date}} was for {{product/service}}. This is part of
            your {{subscription_type}} plan which renews {{billing_cycle}}.

            If you'd like to change your subscription or have questions about future charges,
            I'm happy to help.
            """,
        ),
        _template(
            "Payment Failed",
            "Re: Payment Issue",
            """
            Hi {{customer_name}},

            I see you're having trouble with a payment. Common reasons payments fail:
            - Expired card or incorrect card details
            - Insufficient funds
            - Bank security blocks

            To update your payment method, log in, open Settings > Billing and choose
            "Update Payment Method". If the problem continues, let me know and I'll help
            troubleshoot further.
            """,
        ),
    ],
    "Technical Problem": [
        _template(
            "Bug Report Acknowledgment",
            "Re: Bug Report",
            """
            Hi {{customer_name}},

            Thank you for reporting this issue. I've logged it with our engineering team as
            ticket #{{ticket_id}}.

            To help us investigate faster, could you please send:
            - Your browser and version
            - Steps to reproduce the issue
            - Any error messages you saw

            Our typical resolution time for issues like this is {{timeframe}}.
            """,
        ),
        _template(
            "Troubleshooting Steps",
            "Re: Technical Issue",
            """
            Hi {{customer_name}},

            I'm sorry you're experiencing this issue. Please try these steps:
            1. Clear your browser cache and cookies
            2. Try a different browser
            3. Disable browser extensions temporarily
            4. Try a private browsing window

            If the issue persists, reply with what you were trying to do, what happened
            instead, and any error messages.
            """,
        ),
        _template(
            "Issue Resolved",
            "Re: Technical Issue - Resolved",
            """
            Hi {{customer_name}},

            Good news: the issue you reported has been resolved.

            The problem was {{root_cause}}, and our team has {{fix_description}}.

            Please try again and let me know if everything works as expected.
            """,
        ),
    ],
    "Outage": [
        _template(
            "Outage Acknowledgment",
            "Re: Service Disruption",
            """
            Hi {{customer_name}},

            We're aware of the current service disruption and our team is working to resolve it.

            Current status: {{status}}
            Estimated resolution: {{eta}}

            You can follow real-time updates at {{status_page_url}}. We'll send an update as
            soon as service is restored.
            """,
        ),
        _template(
            "Outage Resolved",
            "Re: Service Restored",
            """
            Hi {{customer_name}},

            The service disruption has been resolved and all systems are operating normally.

            What happened: {{incident_summary}}
            Duration: {{downtime_duration}}
            Resolution: {{resolution_summary}}

            We're sorry for the impact on your work. If you need help catching up, let me know.
            """,
        ),
    ],
    "Account Access": [
        _template(
            "Password Reset",
            "Re: Account Access Help",
            """
            Hi {{customer_name}},

            I can help you regain access to your account. To reset your password:
            1. Go to {{login_url}}
            2. Click "Forgot Password"
            3. Enter your email: {{customer_email}}
            4. Follow the reset link we send you (valid for 24 hours)

            If the email doesn't arrive within 5 minutes, check your spam folder or add
            {{support_email}} to your contacts.
            """,
        ),
        _template(
            "2FA Recovery",
            "Re: Two-Factor Authentication Help",
            """
            Hi {{customer_name}},

            Before we can reset two-factor authentication, I need to verify your identity.
            Please send:
            1. The email address on your account
            2. The last 4 digits of the payment method on file
            3. The approximate date you created the account
            """,
        ),
        _template(
            "Account Unlocked",
            "Re: Account Unlocked",
            """
            Hi {{customer_name}},

            I've unlocked your account. It was temporarily locked due to {{lock_reason}}.

            As a precaution, please change your password, review recent account activity and
            enable two-factor authentication. You can log in at {{login_url}}.
            """,
        ),
    ],
    "Feature Request": [
        _template(
            "Feature Logged",
            "Re: Feature Suggestion",
            """
            Hi {{customer_name}},

            Thank you for sharing your idea about {{feature_summary}}.

            I've added it to our feature request board as #{{request_id}}. Our product team
            reviews every suggestion and prioritizes by customer impact.
            """,
        ),
        _template(
            "Workaround Available",
            "Re: Feature Request - Workaround",
            """
            Hi {{customer_name}},

            We don't have that exact feature yet, but this workaround may help:

            {{workaround_steps}}

            I've also logged the request as #{{request_id}} for our product team.
            """,
        ),
    ],
    "General Inquiry": [
        _template(
            "General Response",
            "Re: Your Question",
            """
            Hi {{customer_name}},

            Thank you for reaching out.

            {{answer}}

            These resources may also help:
            - {{resource_1}}
            - {{resource_2}}
            """,
        ),
        _template(
            "Pricing Inquiry",
            "Re: Pricing Question",
            """
            Hi {{customer_name}},

            Thanks for your interest in our pricing. Here's a quick overview:
            {{pricing_summary}}

            Full details are at {{pricing_url}}.
            """,
        ),
    ],
    "Feedback/Praise": [
        _template(
            "Thank You",
            "Re: Thank You for the Kind Words!",
            """
            Hi {{customer_name}},

            Thank you so much for taking the time to share this feedback. I've passed your
            kind words on to the team.

            Thank you for being a valued customer!
            """,
        ),
        _template(
            "Feedback Acknowledged",
            "Re: Your Feedback",
            """
            Hi {{customer_name}},

            Thank you for sharing your thoughts with us. I've passed your feedback along to
            the right team; every piece of feedback helps us make better decisions.
            """,
        ),
    ],
    UNKNOWN: [
        _template(
            "Clarification Needed",
            "Re: Your Message",
            """
            Hi {{customer_name}},

            Thank you for reaching out. To get you to the right team, could you share a bit
            more about what you're trying to accomplish, any error messages you're seeing,
            and your account email or ID?
            """,
        ),
    ],
}


def templates_for_category(category: str) -> list[ResponseTemplate]:
    """Summary: Return the reply templates for a category.

    Importance: Categories without their own pack use the clarification templates.
    Alternatives: Return an empty list for unmatched categories.
    """

    return list(RESPONSE_TEMPLATES.get(normalize_category(category), RESPONSE_TEMPLATES[UNKNOWN]))


def template_categories() -> list[str]:
    return list(RESPONSE_TEMPLATES)


def fill_template(
    template: str | ResponseTemplate, values: Mapping[str, object] | None = None
) -> str | ResponseTemplate:
    """Summary: Substitute ``{{key}}`` and ``{key}`` placeholders with supplied values.

    Importance: One pass replaces every occurrence; unknown placeholders stay verbatim.
    Alternatives: Use ``str.format`` and fail on missing keys.
    """

    values = values or {}

    def substitute(match: re.Match[str]) -> str:
        key = match.group(1) if match.group(1) is not None else match.group(2)
        if key in values:
            return str(values[key])
        return match.group(0)

    if isinstance(template, str):
        return PLACEHOLDER_PATTERN.sub(substitute, template)
    return replace(template, body=PLACEHOLDER_PATTERN.sub(substitute, template.body))
