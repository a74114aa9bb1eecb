"""File and file-bank tools."""

from typing import (
    Any,
    List,
    Literal,
)

from pydantic import Field

from jamespot_agent.tools import (
    NoArgs,
    ToolArgs,
    ToolDescriptor,
)
from jamespot_agent.tools.support import (
    ToolContext,
    call_backend,
    to_json,
)


class FileIdArgs(ToolArgs):
    id_file: int = Field(..., description="File ID to retrieve")


class UploadFileArgs(ToolArgs):
    url: str = Field(..., description="URL of the file to upload (must be publicly accessible)")
    attr_name: str = Field(..., description='Attribute name for the file (e.g., "file", "image", "document")')
    token: str = Field(
        ...,
        description="Upload token obtained from the network API. The token value must be obtained from the "
        "network tool, and kept to be used after, during the article creation.",
    )


class DuplicateFileArgs(ToolArgs):
    id_file: int = Field(..., description="File ID to duplicate")
    title: str = Field(..., description="Title for the new file/article")
    publish_to: List[str] | None = Field(
        None, description='Array of URIs to publish to (e.g., ["spot/123", "user/456"])'
    )


class UpdateFileArgs(ToolArgs):
    id_file: int = Field(..., description="File ID to update")
    title: str = Field(..., description="New title for the file")


class FileDownloadsArgs(ToolArgs):
    file_id: int = Field(..., description="File ID to get download statistics for")


class CopyFileArgs(ToolArgs):
    id_file: int = Field(..., description="File ID to copy")
    attr_name: str = Field(..., description="Attribute name for the copy operation")
    token: str = Field(..., description="Security token for the operation")


class FoldersArgs(ToolArgs):
    parent_uri: str = Field(..., description='Parent folder URI (e.g., "folder/123")')


class FolderDocumentsArgs(ToolArgs):
    folder_uri: str = Field(..., description='Folder URI to list documents from (e.g., "folder/123")')


class FolderPathArgs(ToolArgs):
    uri: str = Field(..., description='Folder URI to get path for (e.g., "folder/123")')
    mode: Literal["full", "browse"] = Field(
        "browse", description='Mode: "full" for complete details or "browse" for basic info (default: browse)'
    )


class SearchFilesArgs(ToolArgs):
    uri: str = Field(..., description='File bank URI to search within (e.g., "filebank/123")')
    query: str = Field(..., description="Search query text")
    limit: int = Field(20, description="Maximum number of results (default: 20)")
    page: int = Field(1, description="Page number for pagination (default: 1)")


class FileParentsArgs(ToolArgs):
    id: int = Field(..., description="File or folder ID")


class RootFoldersArgs(ToolArgs):
    query: str | None = Field(None, description="Optional search query to filter root folders")
    limit: int = Field(20, description="Maximum number of results (default: 20)")
    page: int = Field(1, description="Page number for pagination (default: 1)")


def _success(message: str):
    def render(result: Any) -> str:
        return to_json({"success": True, "message": message, "result": result})

    return render


def build_file_tools(ctx: ToolContext) -> List[ToolDescriptor]:
    """Create all file and file-bank tools."""

    async def get_file(args: FileIdArgs) -> str:
        return await call_backend(ctx, "jamespot_get_file", "file.get", {"idFile": args.id_file}, failure="Failed to get file")

    async def upload_file(args: UploadFileArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_upload_file",
            "file.upload",
            args.model_dump(by_alias=True),
            failure="Failed to upload file",
            render=_success("File uploaded successfully"),
        )

    async def duplicate_file(args: DuplicateFileArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_duplicate_file",
            "file.duplicate",
            args.model_dump(by_alias=True, exclude_none=True),
            failure="Failed to duplicate file",
            render=_success("File duplicated successfully"),
        )

    async def update_file(args: UpdateFileArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_update_file",
            "file.updateFile",
            args.model_dump(by_alias=True),
            failure="Failed to update file",
            render=_success("File updated successfully"),
        )

    async def file_downloads(args: FileDownloadsArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_file_downloads",
            "file.getDownload",
            {"idFile": args.file_id},
            failure="Failed to get file downloads",
        )

    async def copy_file(args: CopyFileArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_copy_file",
            "file.copy",
            {"id": args.id_file, "attrName": args.attr_name, "token": args.token},
            failure="Failed to copy file",
            render=_success("File copied successfully"),
        )

    async def list_filebanks(_: NoArgs) -> str:
        return await call_backend(ctx, "jamespot_list_filebanks", "filebank.getBanks", failure="Failed to list file banks")

    async def get_folders(args: FoldersArgs) -> str:
        return await call_backend(
            ctx, "jamespot_get_folders", "filebank.getFolders", {"uri": args.parent_uri}, failure="Failed to get folders"
        )

    async def folder_documents(args: FolderDocumentsArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_folder_documents",
            "filebank.getDocuments",
            {"uri": args.folder_uri},
            failure="Failed to get folder documents",
        )

    async def folder_path(args: FolderPathArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_get_folder_path",
            "filebank.getPath",
            args.model_dump(by_alias=True),
            failure="Failed to get folder path",
        )

    async def search_files(args: SearchFilesArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_search_files",
            "filebank.searchContent",
            args.model_dump(by_alias=True),
            failure="Failed to search files",
        )

    async def file_parents(args: FileParentsArgs) -> str:
        return await call_backend(
            ctx, "jamespot_get_file_parents", "filebank.getParents", {"id": args.id}, failure="Failed to get file parents"
        )

    async def root_folders(args: RootFoldersArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_list_root_folders",
            "filebank.getRootFolders",
            args.model_dump(by_alias=True, exclude_none=True),
            failure="Failed to list root folders",
        )

    return [
        ToolDescriptor("jamespot_get_file", "Get information about a file in Jamespot by its ID.", FileIdArgs, get_file),
        ToolDescriptor(
            "jamespot_upload_file",
            "Upload a file to Jamespot from a URL. Use this to add external files or images to the platform. "
            "Returns upload result with file information. Requires a token which can be obtained from the network API.",
            UploadFileArgs,
            upload_file,
        ),
        ToolDescriptor(
            "jamespot_duplicate_file",
            "Duplicate an existing file into a new file/article, optionally publishing it to users or groups.",
            DuplicateFileArgs,
            duplicate_file,
        ),
        ToolDescriptor("jamespot_update_file", "Rename (update the title of) a file.", UpdateFileArgs, update_file),
        ToolDescriptor(
            "jamespot_get_file_downloads",
            "Get download statistics for a file.",
            FileDownloadsArgs,
            file_downloads,
        ),
        ToolDescriptor(
            "jamespot_copy_file",
            "Copy a file so it can be attached elsewhere with the given upload token.",
            CopyFileArgs,
            copy_file,
        ),
        ToolDescriptor("jamespot_list_filebanks", "List the file banks available in Jamespot.", NoArgs, list_filebanks),
        ToolDescriptor("jamespot_get_folders", "List the sub-folders of a folder.", FoldersArgs, get_folders),
        ToolDescriptor(
            "jamespot_get_folder_documents",
            "List the documents stored in a folder.",
            FolderDocumentsArgs,
            folder_documents,
        ),
        ToolDescriptor(
            "jamespot_get_folder_path",
            "Get the path (breadcrumb) from the file bank root to a folder.",
            FolderPathArgs,
            folder_path,
        ),
        ToolDescriptor(
            "jamespot_search_files",
            "Search documents inside a file bank.",
            SearchFilesArgs,
            search_files,
        ),
        ToolDescriptor(
            "jamespot_get_file_parents",
            "Get the parent folders of a file or folder.",
            FileParentsArgs,
            file_parents,
        ),
        ToolDescriptor(
            "jamespot_list_root_folders",
            "List root folders of the file banks, optionally filtered by a query.",
            RootFoldersArgs,
            root_folders,
        ),
    ]
