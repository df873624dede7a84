from pydantic import BaseModel


class CertificateOut(BaseModel):
    name: str
    url: str
