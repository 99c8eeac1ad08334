from pydantic import BaseModel, Field

"""
NEWSLETTER SCHEMA
"""


#Newsletter signup that passed every validation rule
class ValidatedSubscription(BaseModel):
    email: str
    subscription_token: str = Field(min_length=64, max_length=64)

    model_config = {
        "frozen": True
    }
