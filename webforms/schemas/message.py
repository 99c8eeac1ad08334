from pydantic import BaseModel, Field
from typing import Dict

"""
OUTBOUND EMAIL SCHEMA
"""


#Branding and addressing shared by every composed email
class CompanyMeta(BaseModel):
    name: str
    from_email: str
    receiving_email: str

    model_config = {
        "frozen": True
    }


#Multi-part email handed to a mail transport as one opaque unit
class OutboundMessage(BaseModel):
    to: str
    subject: str
    html_body: str
    text_body: str
    reply_to: str
    from_display: str
    headers: Dict[str, str] = Field(default_factory=dict)

    model_config = {
        "frozen": True
    }
