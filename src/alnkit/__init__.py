"""alnkit: gapped multiple sequence alignments, their compressed column-tuple
representation, coordinate maps between sequence and alignment frames, and the
structural transforms applied to them."""

import logging
import os
import typing
import warnings
from importlib import import_module

from alnkit._version import __version__

__copyright__ = "Copyright 2024-date, The alnkit developers"
__license__ = "BSD-3"


def __getattr__(name: str) -> typing.Any:  # noqa: ANN401
    if (attr := globals().get(name)) is not None:
        return attr

    if name not in _import_mapping:
        raise AttributeError(name)

    module_name = _import_mapping[name]
    module = import_module(f".{module_name}", package=__name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


_import_mapping = {
    "Alignment": "core.alignment",
    "AlignmentError": "core.alignment",
    "MsaAlphabet": "core.alphabet",
    "AlphabetError": "core.alphabet",
    "CoordinateMap": "core.coord_map",
    "CategoryMap": "core.category_map",
    "FeatureSet": "core.features",
    "label_categories": "core.overlay",
    "map_feature_coords": "core.overlay",
    "reverse_compl_feats": "core.overlay",
    "make_alignment": "core.alignment",
    "CodingCleanError": "core.clean",
    "coding_clean": "core.clean",
    "indel_clean": "core.clean",
    "mask_macro_indels": "core.clean",
    "missing_to_gaps": "core.clean",
    "load_alignment": "load",
    "load_features": "load",
    "load_category_map": "load",
    "save_features": "format.gff",
    "concat_from_files": "load",
    "open_": "util.io",
}


def __dir__() -> list[str]:
    return list(_import_mapping.keys()) + list(globals().keys())


__all__ = list(_import_mapping.keys())

version = __version__
version_info = tuple(int(v) for v in version.split(".") if v.isdigit())


warn_env = "ALNKIT_WARNINGS"

if warn := os.environ.get(warn_env):
    warnings.simplefilter(warn)


# suppress numba warnings
__numba_logger = logging.getLogger("numba")
__numba_logger.setLevel(logging.WARNING)
