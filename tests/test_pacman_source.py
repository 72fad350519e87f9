"""
Test suite for the pacman source
Tests name validation, command construction and output parsing
"""

import pytest
import subprocess
from unittest.mock import Mock, patch
from skidstall.sources.base import validate_package_name
from skidstall.sources.pacman_source import PacmanSource

PACMAN_SS_OUTPUT = """core/vim 9.1.0-1 [installed]
    Vi Improved, a highly configurable, improved version of the vi text editor
extra/vim-runtime 9.1.0-1
    Vi Improved, runtime
extra/gvim 9.1.0-1
    Vi Improved, a highly configurable, improved version of the vi text editor (with advanced features, such as a GUI)
"""


class TestNameValidation:
    """Package names are checked before reaching a command line"""

    @pytest.mark.security
    def test_package_name_validation(self):
        # Valid Arch package names
        assert validate_package_name("vim") == True
        assert validate_package_name("python-pip") == True
        assert validate_package_name("gtk+3") == True
        assert validate_package_name("lib32-glibc") == True
        assert validate_package_name("xf86-video-vmware") == True
        assert validate_package_name("dotnet-sdk-8.0") == True
        assert validate_package_name("@scope_pkg") == True

        # Command injection attempts
        assert validate_package_name("vim; rm -rf /") == False
        assert validate_package_name("vim && whoami") == False
        assert validate_package_name("$(id)") == False
        assert validate_package_name("`id`") == False
        assert validate_package_name("vim\nrm -rf /") == False
        assert validate_package_name("htop\n") == False

        # Option injection
        assert validate_package_name("-Rns") == False
        assert validate_package_name("--overwrite") == False
        assert validate_package_name(".hidden") == False

        # Uppercase and separators
        assert validate_package_name("Vim") == False
        assert validate_package_name("extra/vim") == False
        assert validate_package_name("vim vim") == False

        # Empty or too long
        assert validate_package_name("") == False
        assert validate_package_name("a" * 256) == False

    @pytest.mark.security
    @patch('skidstall.sources.base.subprocess.run')
    def test_install_blocks_invalid_names(self, mock_run):
        source = PacmanSource()

        result = source.install(["vim", "evil; rm -rf /"])

        assert result.ok == False
        assert "Invalid package name" in result.stderr
        mock_run.assert_not_called()

    @pytest.mark.security
    @patch('skidstall.sources.base.subprocess.run')
    def test_exists_rejects_invalid_name_without_subprocess(self, mock_run):
        source = PacmanSource()

        assert source.exists("$(whoami)") == False
        mock_run.assert_not_called()


class TestPacmanSourceCore:
    """Tests for core pacman queries"""

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_exists(self, mock_run):
        source = PacmanSource(exists_timeout=5)

        mock_run.return_value = Mock(returncode=0, stdout="Name : vim", stderr="")
        assert source.exists("vim") == True

        args, kwargs = mock_run.call_args
        assert args[0] == ['pacman', '-Si', 'vim']
        assert kwargs['timeout'] == 5

        mock_run.return_value = Mock(returncode=1, stdout="", stderr="error: package 'nope' was not found")
        assert source.exists("nope") == False

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_exists_timeout_is_not_found(self, mock_run):
        source = PacmanSource()

        mock_run.side_effect = subprocess.TimeoutExpired(['pacman'], 5)
        assert source.exists("vim") == False

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_missing_binary_is_not_found(self, mock_run):
        source = PacmanSource()

        mock_run.side_effect = FileNotFoundError("pacman")
        assert source.exists("vim") == False
        assert source.is_installed("vim") == False

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_search_parses_names(self, mock_run):
        source = PacmanSource()
        mock_run.return_value = Mock(returncode=0, stdout=PACMAN_SS_OUTPUT, stderr="")

        assert source.search("vim") == ["vim", "vim-runtime", "gvim"]
        assert mock_run.call_args[0][0] == ['pacman', '-Ss', 'vim']

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_search_deduplicates_within_source(self, mock_run):
        source = PacmanSource()
        mock_run.return_value = Mock(
            returncode=0,
            stdout="core/foo 1-1\n    a\nextra/foo 1-1\n    b\nextra/foo-git 2-1\n    c\n",
            stderr="",
        )

        assert source.search("foo") == ["foo", "foo-git"]

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_search_no_matches(self, mock_run):
        source = PacmanSource()
        mock_run.return_value = Mock(returncode=1, stdout="", stderr="")

        assert source.search("zzzz") == []

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_batch_install_single_call(self, mock_run):
        source = PacmanSource(install_timeout=600)
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")

        result = source.install(["htop", "vim"])

        assert result.ok == True
        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args[0] == ['sudo', 'pacman', '-S', '--noconfirm', '--needed', 'htop', 'vim']
        assert kwargs['timeout'] == 600

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_install_failure_keeps_output(self, mock_run):
        source = PacmanSource()
        mock_run.return_value = Mock(returncode=1, stdout="", stderr="error: target not found: nope")

        result = source.install(["nope"])

        assert result.ok == False
        assert result.returncode == 1
        assert "target not found" in result.output

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_install_timeout(self, mock_run):
        source = PacmanSource()
        mock_run.side_effect = subprocess.TimeoutExpired(['sudo'], 600)

        result = source.install(["vim"])

        assert result.ok == False
        assert result.timed_out == True

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_is_installed(self, mock_run):
        source = PacmanSource()

        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")
        assert source.is_installed("git") == True
        assert mock_run.call_args[0][0] == ['pacman', '-Qi', 'git']

        mock_run.return_value = Mock(returncode=1, stdout="", stderr="")
        assert source.is_installed("git") == False

    @pytest.mark.unit
    @patch('skidstall.sources.base.subprocess.run')
    def test_disabled_source_answers_negative(self, mock_run):
        source = PacmanSource()
        source.disable("testing")

        assert source.exists("vim") == False
        assert source.search("vim") == []
        mock_run.assert_not_called()
