"""
Converter selection.

Maps a FHIR version identifier (major version number, version string or
package name) to the converter for that release.
"""
import logging
from typing import Dict, Optional, Union

from ..config import settings
from ..diagnostics import Diagnostics
from ..errors import VersionNotSupportedError
from ..releases import FhirSequence, sequence_for_version
from .base import FhirConverter
from .normative import NormativeConverter
from .r2 import R2Converter
from .r3 import R3Converter
from .r4 import R4Converter
from .r4b import R4BConverter
from .r5 import R5Converter

logger = logging.getLogger(__name__)

TYPED_CONVERTERS: Dict[FhirSequence, type] = {
    FhirSequence.DSTU2: R2Converter,
    FhirSequence.STU3: R3Converter,
    FhirSequence.R4: R4Converter,
    FhirSequence.R4B: R4BConverter,
    FhirSequence.R5: R5Converter,
}


class ConverterFactory:
    """Factory for creating release converters from a version identifier"""

    @staticmethod
    def create(
        version: Union[int, str],
        use_json_tree: bool = False,
        diagnostics: Optional[Diagnostics] = None,
    ) -> FhirConverter:
        """
        Create the converter for a FHIR version.

        Args:
            version: Major version (1-5) or version string ("4.0.1", "5.0.0-ballot", "hl7.fhir.r4b.core")
            use_json_tree: Return the generic JsonTree converter configured for the release
            diagnostics: Optional collector shared with the caller

        Raises:
            VersionNotSupportedError: If the version matches no release
        """
        release = sequence_for_version(version)

        if use_json_tree:
            converter = NormativeConverter(release, diagnostics=diagnostics)
        else:
            converter_class = TYPED_CONVERTERS.get(release)
            if converter_class is None:
                raise VersionNotSupportedError(f"Unsupported FHIR release: {release.value}")
            converter = converter_class(diagnostics=diagnostics)

        logger.debug("Using %s for FHIR version %s", type(converter).__name__, version)
        return converter


def converter_for(
    version: Union[int, str, None] = None,
    diagnostics: Optional[Diagnostics] = None,
    use_json_tree: bool = False,
) -> FhirConverter:
    """ConverterFactory.create with settings.default_fhir_version as the fallback."""
    if version is None or version == "":
        version = settings.default_fhir_version
    return ConverterFactory.create(version, use_json_tree=use_json_tree, diagnostics=diagnostics)
