"""Per-format datastore file converters."""

from .base import FileSetConverter
from .gfa import GeneFamilyAssignmentConverter
from .gt_vcf import GenotypingVCFConverter
from .hsh import PanGeneHashConverter
from .info_annot import GeneInfoAnnotationConverter
from .info_annot_ahrd import GeneFamilyDescriptionConverter
from .info_descriptors import InfoDescriptorsConverter
from .ipr_gff import InterProScanGFFConverter
from .pangene import PanGeneClusterConverter
from .pathway import PathwayConverter
from .phenotype import PhenotypeConverter

__all__ = [
    "FileSetConverter",
    "GeneFamilyAssignmentConverter",
    "GeneFamilyDescriptionConverter",
    "GeneInfoAnnotationConverter",
    "GenotypingVCFConverter",
    "InfoDescriptorsConverter",
    "InterProScanGFFConverter",
    "PanGeneClusterConverter",
    "PanGeneHashConverter",
    "PathwayConverter",
    "PhenotypeConverter",
]
