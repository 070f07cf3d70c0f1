"""
License checks used as a submission precondition

The workflow only needs to know whether a complete ownership declaration
exists. It never changes the License record.
"""
from typing import List

from sqlalchemy.orm import Session

from models import License


REQUIRED_DECLARATIONS = {
    "ownership_confirmed": "Ownership must be confirmed in the license declaration",
    "no_infringement": "The no-infringement declaration must be accepted",
    "accurate_information": "The accurate-information declaration must be accepted",
    "agreement_accepted": "The developer agreement must be accepted",
}


def license_errors(db: Session, game_id: str) -> List[str]:
    """
    List everything missing from the game's License record

    Returns:
        empty list when the license is complete
    """
    license_record = db.query(License).filter(License.game_id == game_id).first()
    if not license_record:
        return ["License information is required"]

    errors = []
    if not license_record.engine_name:
        errors.append("Game engine must be declared in the license")
    if not license_record.copyright_holder:
        errors.append("Copyright holder must be declared in the license")

    for field, message in REQUIRED_DECLARATIONS.items():
        if not getattr(license_record, field):
            errors.append(message)

    return errors
