"""
Integration tests for sshmirror CLI behavior and configuration loading.

Tests:
  - .sshmirror discovery: searching parent directories upward
  - config loading: apply_profile / apply_env correctly mutate module variables
  - sshmirror init: creates a valid .sshmirror YAML, refuses overwrite without --force
  - sshmirror status: fails cleanly without configuration
"""
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path, PurePosixPath


# ── Helpers ───────────────────────────────────────────────────────────────────

REPO_ROOT = Path(__file__).parent.parent


def run_sshmirror(*args, cwd=None, input_text=None, env=None):
    """Run the sshmirror CLI and return (returncode, stdout, stderr)."""
    base_env = {k: v for k, v in os.environ.items() if not k.startswith("SSHMIRROR_")}
    result = subprocess.run(
        [sys.executable, "-m", "sshmirror", *args],
        cwd=str(cwd or REPO_ROOT),
        capture_output=True,
        text=True,
        input=input_text,
        env={**base_env, "PYTHONPATH": str(REPO_ROOT), **(env or {})},
    )
    return result.returncode, result.stdout, result.stderr


def reset_config():
    import sshmirror.config as cfg
    cfg.SSH_HOST = "example.com"
    cfg.SSH_PORT = 22
    cfg.SSH_USER = "root"
    cfg.SSH_KEY_PATH = None
    cfg.SSH_PASSWORD = None
    cfg.LOCAL_ROOT = Path(".")
    cfg.LOCAL_ROOT_SETTING = "."
    cfg.REMOTE_ROOT = None
    cfg.SETTLE_SECONDS = 0.2
    cfg.KEEPALIVE = 30


# ── Tests: .sshmirror discovery ───────────────────────────────────────────────

class TestFindConfigFile(unittest.TestCase):
    """Tests for find_config_file() — upward search through parent directories."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name).resolve()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_find_in_same_directory(self):
        from sshmirror.config import find_config_file
        (self.root / ".sshmirror").write_text("profiles: []\n", encoding="utf-8")
        self.assertEqual(find_config_file(self.root), self.root / ".sshmirror")

    def test_find_in_parent_directory(self):
        from sshmirror.config import find_config_file
        (self.root / ".sshmirror").write_text("profiles: []\n", encoding="utf-8")
        subdir = self.root / "a" / "b" / "c"
        subdir.mkdir(parents=True)
        self.assertEqual(find_config_file(subdir), self.root / ".sshmirror")

    def test_finds_nearest(self):
        from sshmirror.config import find_config_file
        (self.root / ".sshmirror").write_text("profiles: []\n", encoding="utf-8")
        sub_a = self.root / "a"
        sub_a.mkdir()
        (sub_a / ".sshmirror").write_text("profiles: []\n", encoding="utf-8")
        deep = sub_a / "b"
        deep.mkdir()
        self.assertEqual(find_config_file(deep), sub_a / ".sshmirror")


# ── Tests: config loading ─────────────────────────────────────────────────────

class TestLoadProfile(unittest.TestCase):
    """Tests for load_config_file, apply_profile and apply_env."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        reset_config()

    def tearDown(self):
        self.tmpdir.cleanup()
        reset_config()

    def _write(self, content):
        p = self.root / ".sshmirror"
        p.write_text(content, encoding="utf-8")
        return p

    def test_load_profile_basic(self):
        import sshmirror.config as cfg
        p = self._write(
            "profiles:\n"
            "  - name: default\n"
            "    server: myhost.example.com\n"
            "    port: 2222\n"
            "    local_root: /tmp/local\n"
            "    remote_root: /remote/path\n"
            "    settle_seconds: 1.5\n"
        )
        cfg.apply_profile(cfg.get_profile(cfg.load_config_file(p), "default"))
        self.assertEqual(cfg.SSH_HOST, "myhost.example.com")
        self.assertEqual(cfg.SSH_PORT, 2222)
        self.assertEqual(cfg.get_remote_root(), PurePosixPath("/remote/path"))
        self.assertEqual(cfg.SETTLE_SECONDS, 1.5)

    def test_base_remote_prefixes_relative_root(self):
        import sshmirror.config as cfg
        p = self._write(
            "profiles:\n"
            "  - name: default\n"
            "    server: host\n"
            "    remote_root: projects/myrepo\n"
            "defaults:\n"
            "  base_remote: /home/user\n"
        )
        cfg.apply_profile(cfg.get_profile(cfg.load_config_file(p), "default"))
        self.assertEqual(cfg.REMOTE_ROOT, PurePosixPath("/home/user/projects/myrepo"))

    def test_get_profile_by_name_and_fallback(self):
        import sshmirror.config as cfg
        p = self._write(
            "profiles:\n"
            "  - name: dev\n"
            "    server: dev.example.com\n"
            "  - name: prod\n"
            "    server: prod.example.com\n"
        )
        data = cfg.load_config_file(p)
        self.assertEqual(cfg.get_profile(data, "prod")["server"], "prod.example.com")
        self.assertEqual(cfg.get_profile(data, "missing")["server"], "dev.example.com")

    def test_remote_root_defaults_to_local_root_as_written(self):
        import sshmirror.config as cfg
        cfg.apply_profile({"local_root": str(self.root)})
        self.assertEqual(cfg.get_remote_root(), PurePosixPath(str(self.root)))

    def test_relative_local_root_stays_relative_on_remote(self):
        import sshmirror.config as cfg
        cfg.apply_env({"SSHMIRROR_LOCAL_DIR": "proj"})
        self.assertEqual(cfg.get_remote_root(), PurePosixPath("proj"))
        self.assertTrue(cfg.LOCAL_ROOT.is_absolute())

    def test_unset_local_root_maps_to_login_directory(self):
        import sshmirror.config as cfg
        self.assertEqual(cfg.get_remote_root(), PurePosixPath("."))

    def test_env_overrides_profile(self):
        import sshmirror.config as cfg
        cfg.apply_profile({"server": "from-file", "port": 22})
        cfg.apply_env({
            "SSHMIRROR_REMOTE_HOST": "from-env",
            "SSHMIRROR_REMOTE_PORT": "2200",
            "SSHMIRROR_REMOTE_USER": "ec2-user",
            "SSHMIRROR_PRIVATE_KEY": "~/.ssh/id_test",
            "SSHMIRROR_REMOTE_DIR": "/srv/app",
        })
        self.assertEqual(cfg.SSH_HOST, "from-env")
        self.assertEqual(cfg.SSH_PORT, 2200)
        self.assertEqual(cfg.SSH_USER, "ec2-user")
        self.assertEqual(cfg.SSH_KEY_PATH, str(Path.home() / ".ssh" / "id_test"))
        self.assertEqual(cfg.REMOTE_ROOT, PurePosixPath("/srv/app"))

    def test_empty_env_values_ignored(self):
        import sshmirror.config as cfg
        cfg.apply_profile({"server": "from-file"})
        cfg.apply_env({"SSHMIRROR_REMOTE_HOST": ""})
        self.assertEqual(cfg.SSH_HOST, "from-file")


# ── Tests: sshmirror init / status CLI ────────────────────────────────────────

class TestInitCommand(unittest.TestCase):
    """Tests for the 'sshmirror init' subcommand."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.cwd = Path(self.tmpdir.name)
        self.env = {"XDG_CONFIG_HOME": str(self.cwd / "xdg")}

    def tearDown(self):
        self.tmpdir.cleanup()

    def _init(self, *extra):
        return run_sshmirror("init", "--server", "build.example.com", "--user", "deploy",
                             "--port", "2222", "--remote", "/srv/app", *extra,
                             cwd=self.cwd, input_text="", env=self.env)

    def test_creates_loadable_config(self):
        rc, out, err = self._init()
        self.assertEqual(rc, 0, err)
        target = self.cwd / ".sshmirror"
        self.assertTrue(target.is_file())

        import sshmirror.config as cfg
        profile = cfg.get_profile(cfg.load_config_file(target), "default")
        self.assertEqual(profile["server"], "build.example.com")
        self.assertEqual(profile["user"], "deploy")
        self.assertEqual(profile["port"], 2222)
        self.assertEqual(profile["remote_root"], "/srv/app")

    def test_refuses_overwrite_without_force(self):
        self._init()
        rc, _, err = self._init()
        self.assertNotEqual(rc, 0)
        self.assertIn("already exists", err)
        rc, _, err = self._init("--force")
        self.assertEqual(rc, 0, err)

    def test_dry_run_writes_nothing(self):
        rc, out, _ = self._init("--dry-run")
        self.assertEqual(rc, 0)
        self.assertIn("[dry-run]", out)
        self.assertFalse((self.cwd / ".sshmirror").exists())

    def test_status_without_config_fails(self):
        rc, _, err = run_sshmirror("status", cwd=self.cwd, env=self.env)
        self.assertEqual(rc, 1)
        self.assertIn("no .sshmirror", err)

    def test_status_reports_resolved_remote(self):
        self._init()
        rc, out, err = run_sshmirror("status", cwd=self.cwd, env=self.env)
        self.assertEqual(rc, 0, err)
        self.assertIn("deploy@build.example.com:2222:/srv/app", out)


if __name__ == "__main__":
    unittest.main()
