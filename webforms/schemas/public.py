from pydantic import BaseModel

"""
PUBLIC ROUTE SCHEMA
"""


#Single response shape returned by every public form endpoint
class SubmissionOut(BaseModel):
    success: bool
    message: str
