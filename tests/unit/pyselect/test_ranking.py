"""
Unit tests for filtering and ranking.
"""

import pytest

from pyselect.models import InstallScope, PlatformWidth
from pyselect.ranking import DistributionFilter, parse_version, rank, sort_distributions

from conftest import make_dist

CU = InstallScope.CURRENT_USER
AU = InstallScope.ALL_USERS
B32 = PlatformWidth.BIT32
B64 = PlatformWidth.BIT64


def _keys(dists):
    return [(d.vendor, d.reported_version, d.platform_width.value, d.install_scope.value) for d in dists]


@pytest.fixture
def mixed():
    return [
        make_dist('Zeta', '1.0', '3.9.1', B64, AU),
        make_dist('Acme', '2.7', '2.7.18', B32, AU),
        make_dist('PythonCore', '3.9', '3.9.1', B64, AU),
        make_dist('PythonCore', '3.11-32', '3.11.0', B32, AU),
        make_dist('Acme', '3.11', '3.11.0', B64, AU),
        make_dist('PythonCore', '3.11', '3.11.0', B64, AU),
        make_dist('PythonCore', '2.7', '2.7.18', B64, CU),
        make_dist('Acme', '3.9', '3.9.1', B64, CU),
    ]


class TestRank:

    def test_default_vendor_first_then_alphabetical(self, mixed):
        vendors = [d.vendor for d in rank(mixed)]
        assert vendors == ['PythonCore'] * 4 + ['Acme'] * 3 + ['Zeta']

    def test_full_order(self, mixed):
        assert _keys(rank(mixed)) == [
            # default vendor: CurrentUser first, then version desc, 64 before 32
            ('PythonCore', '2.7.18', 64, 'CurrentUser'),
            ('PythonCore', '3.11.0', 64, 'AllUsers'),
            ('PythonCore', '3.11.0', 32, 'AllUsers'),
            ('PythonCore', '3.9.1', 64, 'AllUsers'),
            ('Acme', '3.9.1', 64, 'CurrentUser'),
            ('Acme', '3.11.0', 64, 'AllUsers'),
            ('Acme', '2.7.18', 32, 'AllUsers'),
            ('Zeta', '3.9.1', 64, 'AllUsers'),
        ]

    def test_version_compared_semantically(self):
        dists = [
            make_dist('PythonCore', '3.9', '3.9.1'),
            make_dist('PythonCore', '3.11', '3.11.0'),
            make_dist('PythonCore', '3.10', '3.10.12'),
        ]
        assert [d.reported_version for d in rank(dists)] == ['3.11.0', '3.10.12', '3.9.1']

    def test_tag_breaks_remaining_ties(self):
        dists = [
            make_dist('Acme', 'b', '1.0.0'),
            make_dist('Acme', 'a', '1.0.0'),
        ]
        assert [d.tag for d in rank(dists)] == ['a', 'b']

    def test_vendor_sort_is_case_insensitive(self):
        dists = [make_dist('beta'), make_dist('Alpha'), make_dist('Gamma')]
        assert [d.vendor for d in rank(dists)] == ['Alpha', 'beta', 'Gamma']

    def test_default_vendor_match_is_case_insensitive(self):
        dists = [make_dist('Acme', '3.12', '3.12.0'), make_dist('pythoncore', '3.9', '3.9.1')]
        ranked = rank(dists, DistributionFilter(vendor='python'))
        assert [d.vendor for d in ranked] == ['pythoncore']
        assert [d.vendor for d in rank(dists)] == ['pythoncore', 'Acme']

    def test_custom_default_vendor(self, mixed):
        assert rank(mixed, default_vendor='Zeta')[0].vendor == 'Zeta'

    def test_deterministic_for_any_input_order(self, mixed):
        expected = _keys(rank(mixed))
        assert _keys(rank(list(reversed(mixed)))) == expected
        assert _keys(rank(mixed[3:] + mixed[:3])) == expected

    def test_empty_input(self):
        assert rank([]) == []

    def test_sort_without_partition_is_alphabetical(self, mixed):
        vendors = [d.vendor for d in sort_distributions(mixed) if d.install_scope == AU]
        assert vendors == ['Acme', 'Acme', 'PythonCore', 'PythonCore', 'PythonCore', 'Zeta']


class TestDistributionFilter:

    def test_vendor_prefix_case_insensitive(self, mixed):
        assert {d.vendor for d in rank(mixed, DistributionFilter(vendor='py'))} == {'PythonCore'}
        assert {d.vendor for d in rank(mixed, DistributionFilter(vendor='Py'))} == {'PythonCore'}

    def test_vendor_infix_does_not_match(self, mixed):
        assert rank(mixed, DistributionFilter(vendor='ython')) == []

    def test_version_prefix(self, mixed):
        versions = {d.reported_version for d in rank(mixed, DistributionFilter(version='3'))}
        assert versions == {'3.9.1', '3.11.0'}

    def test_tag_prefix(self, mixed):
        tags = {d.tag for d in rank(mixed, DistributionFilter(vendor='PythonCore', tag='3.11'))}
        assert tags == {'3.11', '3.11-32'}

    def test_platform_width_exact(self, mixed):
        result = rank(mixed, DistributionFilter(platform_width=B32))
        assert {d.platform_width for d in result} == {B32}
        assert len(result) == 2

    def test_install_scope_exact(self, mixed):
        result = rank(mixed, DistributionFilter(install_scope=CU))
        assert [d.vendor for d in result] == ['PythonCore', 'Acme']

    def test_filters_are_combined(self, mixed):
        result = rank(mixed, DistributionFilter(vendor='Acme', version='3', platform_width=B64))
        assert _keys(result) == [
            ('Acme', '3.9.1', 64, 'CurrentUser'),
            ('Acme', '3.11.0', 64, 'AllUsers'),
        ]

    def test_no_match_is_empty(self, mixed):
        assert rank(mixed, DistributionFilter(version='9.9')) == []

    def test_describe(self):
        text = DistributionFilter(vendor='Acme', version='9.9', platform_width=B32).describe()
        assert "vendor 'Acme'" in text
        assert "version '9.9'" in text
        assert "32-bit" in text

    def test_describe_empty(self):
        assert DistributionFilter().describe() == 'any criteria'


def test_parse_version_invalid_sorts_lowest():
    assert parse_version('not-a-version') < parse_version('0.0.1')
