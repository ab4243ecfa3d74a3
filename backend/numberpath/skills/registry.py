"""Read-only skill registry: maps competency id to contract instance."""

from .basic_range import BasicRangeContract, MakeTenContract
from .complements import ComplementContract
from .placeholders import PlaceholderContract
from .pure_multiples import PureMultiplesContract
from .strategies import (
    DoublesContract,
    InverseOperationsContract,
    NearDoublesContract,
    NumberBondsContract,
)

SKILL_REGISTRY = {
    "addition_ZR10_no_transition": BasicRangeContract("addition_ZR10_no_transition"),
    "subtraction_ZR10_no_transition": BasicRangeContract("subtraction_ZR10_no_transition"),
    "addition_to_10": MakeTenContract("addition_to_10"),
    "subtraction_from_10": MakeTenContract("subtraction_from_10"),
    "addition_ZR20_no_transition": BasicRangeContract("addition_ZR20_no_transition"),
    "subtraction_ZR20_no_transition": BasicRangeContract("subtraction_ZR20_no_transition"),
    "addition_with_transition": BasicRangeContract("addition_with_transition"),
    "subtraction_with_transition": BasicRangeContract("subtraction_with_transition"),
    "placeholder_end": PlaceholderContract("placeholder_end"),
    "placeholder_middle": PlaceholderContract("placeholder_middle"),
    "placeholder_start": PlaceholderContract("placeholder_start"),
    "doubles": DoublesContract("doubles"),
    "near_doubles": NearDoublesContract("near_doubles"),
    "number_bonds_10": NumberBondsContract("number_bonds_10"),
    "inverse_operations": InverseOperationsContract("inverse_operations"),
    "addition_ZR30_no_transition": BasicRangeContract("addition_ZR30_no_transition"),
    "subtraction_ZR30_no_transition": BasicRangeContract("subtraction_ZR30_no_transition"),
    "addition_ZR40_no_transition": BasicRangeContract("addition_ZR40_no_transition"),
    "subtraction_ZR40_no_transition": BasicRangeContract("subtraction_ZR40_no_transition"),
    "addition_ZR50_no_transition": BasicRangeContract("addition_ZR50_no_transition"),
    "subtraction_ZR50_no_transition": BasicRangeContract("subtraction_ZR50_no_transition"),
    "addition_ZR80_no_transition": BasicRangeContract("addition_ZR80_no_transition"),
    "subtraction_ZR80_no_transition": BasicRangeContract("subtraction_ZR80_no_transition"),
    "addition_ZR100_no_transition": BasicRangeContract("addition_ZR100_no_transition"),
    "subtraction_ZR100_no_transition": BasicRangeContract("subtraction_ZR100_no_transition"),
    "addition_ZR100_with_transition": BasicRangeContract("addition_ZR100_with_transition"),
    "subtraction_ZR100_with_transition": BasicRangeContract("subtraction_ZR100_with_transition"),
    "addition_ZR200_no_transition": BasicRangeContract("addition_ZR200_no_transition"),
    "subtraction_ZR200_no_transition": BasicRangeContract("subtraction_ZR200_no_transition"),
    "addition_ZR500_no_transition": BasicRangeContract("addition_ZR500_no_transition"),
    "subtraction_ZR500_no_transition": BasicRangeContract("subtraction_ZR500_no_transition"),
    "addition_ZR1000_no_transition": BasicRangeContract("addition_ZR1000_no_transition"),
    "subtraction_ZR1000_no_transition": BasicRangeContract("subtraction_ZR1000_no_transition"),
    "addition_ZR1000_with_transition": BasicRangeContract("addition_ZR1000_with_transition"),
    "subtraction_ZR1000_with_transition": BasicRangeContract("subtraction_ZR1000_with_transition"),
    "complement_to_20": ComplementContract("complement_to_20"),
    "complement_to_30": ComplementContract("complement_to_30"),
    "complement_to_40": ComplementContract("complement_to_40"),
    "complement_to_50": ComplementContract("complement_to_50"),
    "complement_to_80": ComplementContract("complement_to_80"),
    "complement_to_100": ComplementContract("complement_to_100"),
    "complement_to_200": ComplementContract("complement_to_200"),
    "complement_to_500": ComplementContract("complement_to_500"),
    "complement_to_1000": ComplementContract("complement_to_1000"),
    "pure_decades_addition": PureMultiplesContract("pure_decades_addition"),
    "pure_decades_subtraction": PureMultiplesContract("pure_decades_subtraction"),
    "pure_hundreds_addition": PureMultiplesContract("pure_hundreds_addition"),
    "pure_hundreds_subtraction": PureMultiplesContract("pure_hundreds_subtraction"),
}
