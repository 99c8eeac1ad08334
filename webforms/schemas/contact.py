from pydantic import BaseModel
from typing import Optional

"""
CONTACT FORM SCHEMA
"""


#Contact submission that passed every validation rule (values already HTML-encoded)
class ValidatedContact(BaseModel):
    name: str
    email: str
    subject: str
    message: str
    phone: Optional[str] = None
    company: Optional[str] = None

    model_config = {
        "frozen": True
    }
