DOCUMENT_TYPES = {
    "resume": "Resume/CV",
    "degree-certificate": "Degree Certificate",
    "experience-certificate": "Experience Certificate",
    "experience-letter": "Experience Letter",
    "skill-certificate": "Skill Certification",
    "identity-proof": "Identity Proof",
    "address-proof": "Address Proof",
    "employment-records": "Previous Employment Records",
    "academic-transcripts": "Academic Transcripts",
    "professional-references": "Professional References",
    "portfolio": "Portfolio/Work Samples",
    "other": "Other",
}

REQUESTABLE_TYPES = {slug for slug in DOCUMENT_TYPES if slug != "other"}

# MIME type -> accepted file extensions
ACCEPTED_UPLOAD_TYPES = {
    "application/pdf": {".pdf"},
    "image/png": {".png"},
    "image/jpeg": {".jpg", ".jpeg"},
    "image/gif": {".gif"},
    "application/msword": {".doc"},
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": {".docx"},
}

ROLES = ("hr", "user")
