from .service import UploadDispatcher, blob_name_for, decode_file_content, encode_file_content

__all__ = ["UploadDispatcher", "blob_name_for", "decode_file_content", "encode_file_content"]
