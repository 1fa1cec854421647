# vinac

`vinac` is a small archiver. It keeps any number of files, its *members*, in one archive file. Each member is stored either as it is or compressed with a plain LZ77 coder. A directory at the start of the archive holds the metadata for every member: its name, owner UID, original size, size on disk, modification time, position and offset.

## Installation

```
pip install .
```

## Command line

```
vinac <option> <archive> [member ...]
```

| Option | Meaning |
| ------ | ------- |
| `-p` | Insert or update members without compression. |
| `-i` | Insert or update members with compression. A member is stored compressed only when that makes it smaller. |
| `-m` | `vinac -m <archive> <member> [target]` moves `member` so that it comes right after `target`. With no target, `member` moves to the start. |
| `-x` | Extract the named members, or every member when none are named. If a file with that name already exists, the member is written as `name(1).ext`, `name(2).ext` and so on. |
| `-r` | Remove the named members from the archive. |
| `-c` | List the archive's contents with each member's metadata. The listing labels are in Portuguese. |

Examples:

```
vinac -i backup.vc notes.txt photo.png
vinac -c backup.vc
vinac -m backup.vc photo.png
vinac -x backup.vc notes.txt
vinac -r backup.vc notes.txt
```

If `-p` or `-i` names an archive that does not exist, the archive is created. When a command fails it exits with status 1. Apart from the case where the archive cannot be created, it also prints a message to standard error.

A member's name is the path given when it was inserted, and it is extracted to that same path. Names are cut to 127 bytes.

## Library use

`vinac.lz` works on byte strings:

```python
from vinac import lz

packed = lz.compress(b"abcabcabcabcabcabc")
assert lz.uncompress(packed) == b"abcabcabcabcabcabc"
```

`lz.compress_fast` writes the same format, with back-references kept shorter than `lz.MAX_OFFSET`. `lz.uncompress` raises `ValueError` when its input is truncated or malformed.

The functions in `vinac.archive` are `insert_member`, `insert_member_compressed`, `remove_member`, `extract_member`, `move_member`, `format_members` and `list_members`. They take an archive opened in binary read/write mode:

```python
from vinac import archive
from vinac.directory import Directory

with open("backup.vc", "w+b") as arch:
    archive.insert_member_compressed(arch, "notes.txt")
    print(archive.format_members(Directory.read(arch)))
```

`vinac.directory.Directory` reads and writes the member records, and `MemberInfo` is one record.

When an archive operation cannot be carried out, for example because a member is missing or the archive is empty, it raises `vinac.directory.ArchiveError`. File access errors come through as `OSError`.

## Limits

`vinac` stores plain files only. It does not walk directories or keep file permissions. On extraction it does not restore the owner or the modification time.