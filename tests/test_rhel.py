from semaphore_installer import rhel
from semaphore_installer.config import HASHICORP_REPO_URL
from semaphore_installer.prompts import prompt_yes_no
from semaphore_installer.provisioner import Provisioner

from fakes import RPM_URL, FakeRunner, scripted_answers


def run_plan(ctx):
    return Provisioner(ctx, rhel.build_plan(skip_preflight=True)).run()


def test_declining_optional_installs(make_context, conf_dir):
    confirm = scripted_answers(False, False)
    ctx = make_context("rhel", confirm=confirm, conf_dir=conf_dir)
    config = ctx.config

    report = run_plan(ctx)

    assert report.succeeded, report.failure
    assert confirm.asked == [
        "Would you like to install Terraform?",
        "Would you like to install OpenTofu?",
    ]
    assert ctx.asset_url == RPM_URL
    package = ctx.workspace / "semaphore.rpm"
    assert ctx.runner.commands == [
        ["groupadd", "semaphore"],
        [
            "useradd",
            "--system",
            "--create-home",
            "--home",
            "/home/semaphore",
            "--shell",
            "/bin/false",
            "--gid",
            "semaphore",
            "semaphore",
        ],
        ["dnf", "install", "-y", "mariadb-server", "mariadb"],
        ["systemctl", "enable", "--now", "mariadb"],
        ["mysql_secure_installation"],
        ["mysql", "-u", "root"],
        ["dnf", "install", "-y", "ansible"],
        ["dnf", "install", "-y", str(package)],
        ["semaphore", "setup"],
        ["mkdir", str(config.config_dir)],
        ["mv", str(config.work_dir / "config.json"), str(config.config_dir) + "/"],
        ["chown", "-R", "semaphore:semaphore", str(config.config_dir)],
        ["cp", str(conf_dir / "semaphore.service"), str(config.unit_path)],
        ["systemctl", "daemon-reload"],
        ["systemctl", "enable", "semaphore.service"],
        ["systemctl", "start", "semaphore.service"],
        ["systemctl", "status", "--no-pager", "semaphore.service"],
    ]
    assert [r.name for r in report.results if r.status == "skipped"] == [
        "install_terraform",
        "install_opentofu",
    ]


def test_no_then_n_answers_skip_both_installs(make_context, conf_dir):
    answers = iter(["no", "n"])
    ctx = make_context("rhel", conf_dir=conf_dir)
    ctx.confirm = lambda question: prompt_yes_no(question, ask=lambda q: next(answers))

    report = run_plan(ctx)

    assert report.succeeded
    assert not any("terraform" in " ".join(cmd) for cmd in ctx.runner.commands)
    assert not any("opentofu" in " ".join(cmd) for cmd in ctx.runner.commands)


def test_database_bootstrap_reads_conf_and_settles(make_context, conf_dir):
    delays = []
    ctx = make_context("rhel", confirm=scripted_answers(False, False), conf_dir=conf_dir)
    ctx.sleep = delays.append

    run_plan(ctx)

    mysql = next(call for call in ctx.runner.calls if call["cmd"] == ["mysql", "-u", "root"])
    assert mysql["stdin_file"] == conf_dir / "mariadb.conf"
    secure = next(c for c in ctx.runner.calls if c["cmd"] == ["mysql_secure_installation"])
    assert secure["interactive"] is True
    assert delays == [5.0]


def test_missing_bootstrap_script_aborts(make_context, tmp_path):
    empty = tmp_path / "empty-conf"
    empty.mkdir()
    ctx = make_context("rhel", confirm=scripted_answers(False, False), conf_dir=empty)

    report = run_plan(ctx)

    assert report.failure.name == "install_database"
    assert ctx.runner.commands[-1][0] == "useradd"


def test_group_creation_failure_stops_before_user(make_context, conf_dir):
    ctx = make_context("rhel", runner=FakeRunner(fail_on=[["groupadd"]]), conf_dir=conf_dir)

    report = run_plan(ctx)

    assert report.failure.message == "Failed to create semaphore group"
    assert ctx.runner.commands == [["groupadd", "semaphore"]]


def test_terraform_install(make_context, conf_dir):
    ctx = make_context("rhel", confirm=scripted_answers(True, False), conf_dir=conf_dir)

    report = run_plan(ctx)

    assert report.succeeded
    commands = ctx.runner.commands
    start = commands.index(["dnf", "-y", "install", "yum-utils"])
    assert commands[start : start + 3] == [
        ["dnf", "-y", "install", "yum-utils"],
        ["yum-config-manager", "--add-repo", HASHICORP_REPO_URL],
        ["dnf", "-y", "install", "terraform"],
    ]
    assert commands[start + 3] == ["systemctl", "daemon-reload"]


def test_terraform_failure_aborts_before_activation(make_context, conf_dir):
    runner = FakeRunner(fail_on=[["yum-config-manager"]])
    ctx = make_context("rhel", runner=runner, confirm=scripted_answers(True), conf_dir=conf_dir)

    report = run_plan(ctx)

    assert report.failure.name == "install_terraform"
    assert report.failure.message == "Failed to add HashiCorp repository"
    assert not any(cmd[:2] == ["systemctl", "daemon-reload"] for cmd in runner.commands)


def test_opentofu_install(make_context, conf_dir):
    ctx = make_context("rhel", confirm=scripted_answers(False, True), conf_dir=conf_dir)

    report = run_plan(ctx)

    assert report.succeeded
    script = ctx.workspace / "install-opentofu.sh"
    assert [str(script), "--install-method", "rpm"] in ctx.runner.commands
    assert not script.exists()


def test_preanswered_options_skip_prompts(make_context, conf_dir):
    def fail(question):
        raise AssertionError(f"unexpected prompt: {question}")

    ctx = make_context(
        "rhel",
        confirm=fail,
        conf_dir=conf_dir,
        install_terraform=False,
        install_opentofu=False,
    )

    assert run_plan(ctx).succeeded
