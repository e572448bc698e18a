import textwrap

from ssh_config_editor.core import parser
from ssh_config_editor.core.model import Comment, Empty, GlobalOption, HostEntry, Include
from ssh_config_editor.core.store import render_file


def test_line_serialization(tmp_path):
    src = tmp_path / 'config'
    assert Comment(text='  # note', source_file=src).serialize() == '  # note\n'
    assert Empty(source_file=src).serialize() == '\n'
    assert Include(path='conf.d/*', source_file=src).serialize() == 'Include conf.d/*\n'
    assert GlobalOption(key='User', value='me', source_file=src).serialize() == 'User me\n'
    host = HostEntry(pattern='web *.corp', options=[('User', 'ops'), ('Port', '2222')], source_file=src)
    assert host.serialize() == 'Host web *.corp\n    User ops\n    Port 2222\n'


def test_render_preserves_comments_blanks_and_includes(tmp_path):
    text = textwrap.dedent("""\
        # top comment
          # indented comment

        Include   missing/*.conf
        Compression yes
        """)
    cfg = tmp_path / 'config'
    cfg.write_text(text, encoding='utf-8')
    doc = parser.parse_config_file(cfg)
    rendered = render_file(doc, cfg)
    assert rendered.splitlines()[:4] == ['# top comment', '  # indented comment', '', 'Include missing/*.conf']
    assert rendered.endswith('Compression yes\n')


def test_render_normalizes_host_indentation(tmp_path):
    cfg = tmp_path / 'config'
    cfg.write_text("Host a\n\tUser x\n  Port 1\n", encoding='utf-8')
    doc = parser.parse_config_file(cfg)
    assert render_file(doc, cfg) == "Host a\n    User x\n    Port 1\n"


def test_render_only_emits_lines_of_target(tmp_path):
    cfg = tmp_path / 'config'
    cfg.write_text("Include sub.config\nHost main\n", encoding='utf-8')
    sub = tmp_path / 'sub.config'
    sub.write_text("# sub file\nHost x\n    Port 1\n", encoding='utf-8')
    doc = parser.parse_config_file(cfg)
    assert render_file(doc, cfg) == "Include sub.config\nHost main\n"
    assert render_file(doc, sub) == "# sub file\nHost x\n    Port 1\n"
    assert render_file(doc, tmp_path / 'unrelated') == ''


def test_added_option_only_changes_its_file(tmp_path):
    cfg = tmp_path / 'config'
    cfg.write_text("Include sub.config\nHost main\n    User root\n", encoding='utf-8')
    sub = tmp_path / 'sub.config'
    sub.write_text("Host x\n    Port 1\n", encoding='utf-8')
    doc = parser.parse_config_file(cfg)
    main_before = render_file(doc, cfg)

    host = doc.find_host('x')
    host.add_option('Port', '2222')

    assert '    Port 2222' in render_file(doc, sub).splitlines()
    assert render_file(doc, cfg) == main_before


def test_render_accepts_relative_target(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = tmp_path / 'config'
    cfg.write_text("Host a\n", encoding='utf-8')
    doc = parser.parse_config_file('config')
    assert doc.root == cfg
    assert render_file(doc, 'config') == 'Host a\n'
