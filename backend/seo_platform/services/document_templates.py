"""
Prompt templates for generated documents
"""

from typing import Dict, NamedTuple, Optional


class DocumentTemplate(NamedTuple):
    title: str
    prompt: str


TEMPLATES: Dict[str, DocumentTemplate] = {
    "privacy-policy": DocumentTemplate(
        title="Privacy Policy",
        prompt="""Generate a professional and GDPR-compliant Privacy Policy for a company called "{workspace_name}" ({domain}).

The policy should include:
- Introduction explaining data collection practices
- Types of data collected (personal info, usage data, cookies)
- How data is used (service provision, analytics, communications)
- Data retention and security measures
- User rights (access, deletion, portability)
- Third-party services and processors
- International data transfers
- Contact information for privacy inquiries
- Updates to the policy

Make it comprehensive but readable, using clear sections. Use generic language that doesn't make specific legal claims. Include placeholder text where company-specific details would go.""",
    ),
    "dpa": DocumentTemplate(
        title="Data Processing Agreement",
        prompt="""Generate a Data Processing Agreement (DPA) for "{workspace_name}" that complies with GDPR requirements.

Include sections for:
- Definitions of key terms (Controller, Processor, Data Subject, Personal Data)
- Subject matter and duration of processing
- Nature and purpose of processing
- Types of personal data processed
- Categories of data subjects
- Processor obligations (security, confidentiality, subprocessing)
- Controller obligations
- Security measures and breach notification
- Data subject rights support
- Audit and compliance provisions
- Liability and indemnification
- Termination and data return/deletion

Use standard DPA language appropriate for SaaS businesses. Keep it professional without making specific legal claims.""",
    ),
    "terms": DocumentTemplate(
        title="Terms of Service",
        prompt="""Generate Terms of Service for "{workspace_name}" ({domain}), a SaaS SEO platform.

Include sections for:
- Acceptance of terms
- Service description
- Account registration and security
- Acceptable use policy
- Intellectual property rights
- Payment terms and billing
- Cancellation and refunds
- Service availability and modifications
- Limitation of liability
- Indemnification
- Dispute resolution
- Governing law
- Changes to terms
- Contact information

Make it professional and comprehensive while using generic language that doesn't make specific legal claims.""",
    ),
    "cookie-policy": DocumentTemplate(
        title="Cookie Policy",
        prompt="""Generate a Cookie Policy for "{workspace_name}" ({domain}) that explains cookie usage in compliance with GDPR and the ePrivacy Directive.

Include:
- What cookies are and how they work
- Types of cookies used: essential, functional, analytics and marketing
- How users can manage cookie preferences
- Third-party cookies and services
- Cookie duration and expiration
- Updates to the cookie policy
- Contact information

Make it user-friendly and informative while being legally compliant. Use clear, non-technical language where possible.""",
    ),
    "seo-audit-report": DocumentTemplate(
        title="SEO Audit Report Template",
        prompt="""Generate a professional SEO Audit Report template for "{workspace_name}" ({domain}).

Structure the report with these sections:
- Executive Summary
- Technical SEO Analysis (site speed, mobile-friendliness, crawlability, site structure)
- On-Page SEO (title tags and meta descriptions, header tags, content quality, internal linking)
- Off-Page SEO (backlink profile, domain authority, social signals)
- Content Analysis (content gaps, keyword opportunities, competitive analysis)
- Recommendations (high-priority actions, medium-priority improvements, long-term strategies)
- Conclusion and next steps

Use professional language with placeholder sections for actual data and findings.""",
    ),
}


def get_template(name: str) -> Optional[DocumentTemplate]:
    return TEMPLATES.get(name)


def render_prompt(template: DocumentTemplate, workspace_name: str, domain: Optional[str] = None) -> str:
    return template.prompt.format(
        workspace_name=workspace_name,
        domain=domain or "[Your Website URL]",
    )
